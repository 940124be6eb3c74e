from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
import re

from messages.errors import MalformedTimeLiteralError

NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MICROSECOND = 1_000
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_LITERAL_RE = re.compile(
    r'(?P<sign>-?)(?P<seconds>0|[1-9][0-9]*)\.(?P<fraction>[0-9]{9})'
)


def format_nanos(nanos: int) -> str:
    """Render nanoseconds as ``<seconds>.<9 digit fraction>``.

    The sign, if any, applies to the whole literal: -1.5s is
    ``-1.500000000``, never ``-2.500000000``.
    """
    sign = '-' if nanos < 0 else ''
    seconds, fraction = divmod(abs(nanos), NANOS_PER_SECOND)
    return f'{sign}{seconds}.{fraction:09d}'


def parse_nanos(literal: str) -> int:
    if not isinstance(literal, str):
        raise MalformedTimeLiteralError(literal)
    match = _LITERAL_RE.fullmatch(literal)
    if match is None:
        raise MalformedTimeLiteralError(literal)
    nanos = int(match['seconds']) * NANOS_PER_SECOND + int(match['fraction'])
    if match['sign']:
        # format_nanos never writes -0.000000000
        if nanos == 0:
            raise MalformedTimeLiteralError(literal)
        return -nanos
    return nanos


def _timedelta_to_nanos(delta: timedelta) -> int:
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    return micros * _NANOS_PER_MICROSECOND


@dataclass(frozen=True, order=True)
class Timestamp:
    """Point in time as nanoseconds since Jan 1, 1970 UTC."""

    nanos: int

    @classmethod
    def from_datetime(cls, value: datetime) -> 'Timestamp':
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return cls(_timedelta_to_nanos(value - _EPOCH))

    @classmethod
    def parse(cls, literal: str) -> 'Timestamp':
        return cls(parse_nanos(literal))

    def to_datetime(self) -> datetime:
        # datetime only keeps microseconds
        return _EPOCH + timedelta(microseconds=self.nanos // _NANOS_PER_MICROSECOND)

    def format(self) -> str:
        return format_nanos(self.nanos)

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True, order=True)
class Duration:
    """Signed elapsed time in nanoseconds."""

    nanos: int

    @classmethod
    def from_timedelta(cls, value: timedelta) -> 'Duration':
        return cls(_timedelta_to_nanos(value))

    @classmethod
    def from_seconds(cls, seconds: float) -> 'Duration':
        return cls(round(seconds * NANOS_PER_SECOND))

    @classmethod
    def parse(cls, literal: str) -> 'Duration':
        return cls(parse_nanos(literal))

    @property
    def seconds(self) -> float:
        return self.nanos / NANOS_PER_SECOND

    def to_timedelta(self) -> timedelta:
        return timedelta(microseconds=self.nanos / _NANOS_PER_MICROSECOND)

    def format(self) -> str:
        return format_nanos(self.nanos)

    def __str__(self) -> str:
        return self.format()
