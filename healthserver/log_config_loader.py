from collections.abc import Callable
from functools import partial
import logging
from pathlib import Path
import sys
import time
from typing import Any

import orjson

LOG_CONFIG_PATH = Path(__file__).with_name('log_config.json')


def load_log_config(path: Path = LOG_CONFIG_PATH) -> dict[str, Any]:
    try:
        data = orjson.loads(path.read_bytes())
    except FileNotFoundError as e:
        raise RuntimeError(f'Log config file not found: {path}') from e
    except orjson.JSONDecodeError as e:
        raise RuntimeError(f'Invalid JSON in log config file {path}: {e}') from e
    if not isinstance(data, dict):
        raise RuntimeError(
            f'Expected JSON object in {path}, got {type(data).__name__}'
        )
    data['standard_fields'] = frozenset(data.get('standard_fields', ()))
    data.setdefault('quiet_loggers', [])
    return data


class BaseFormatter(logging.Formatter):
    def __init__(
        self, service_name: str, version: str, standard_fields: frozenset[str]
    ):
        super().__init__()
        self.service_name = service_name
        self.version = version
        self.standard_fields = standard_fields

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ct = self.converter(record.created)
        return f'{time.strftime("%d.%m.%Y %H:%M:%S", ct)}.{int(record.msecs):03d}'

    def _get_extra(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.standard_fields and not key.startswith('_')
        }


class JsonFormatter(BaseFormatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'service': self.service_name,
            'version': self.version,
            'logger': record.name,
            'message': record.getMessage(),
            **self._get_extra(record),
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str).decode('utf-8')


class TextFormatter(BaseFormatter):
    def format(self, record: logging.LogRecord) -> str:
        extra = ' '.join(f'[{k}={v}]' for k, v in self._get_extra(record).items())
        message = f'{record.getMessage()} {extra}'.strip()
        line = (
            f'{self.formatTime(record)} '
            f'[{record.levelname:<8}] {record.name}: {message}'
        )
        if record.exc_info:
            line += f'\n{self.formatException(record.exc_info)}'
        return line


def create_formatter(
    log_format: str, service_name: str, version: str, standard_fields: frozenset[str]
) -> BaseFormatter:
    formatters: dict[str, Callable[[], BaseFormatter]] = {
        'json': partial(JsonFormatter, service_name, version, standard_fields),
        'text': partial(TextFormatter, service_name, version, standard_fields),
    }
    return formatters.get(log_format.lower(), formatters['text'])()


def setup_logging(
    service_name: str,
    level: str,
    log_format: str,
    version: str,
) -> None:
    config = load_log_config()
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    formatter = create_formatter(
        log_format, service_name, version, config['standard_fields']
    )
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for logger_name in config['quiet_loggers']:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
