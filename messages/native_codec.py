"""Self-describing byte encoding of metrics in their native representation.

Values that JSON cannot carry as-is (timestamps, durations, distributions)
are written as ``{"__type__": <tag>, "value": <encoded>}`` using the types
registered here, so a native ``value`` or ``timestamp`` survives the trip
without the reader knowing its kind up front.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import logging
from typing import Any

import orjson

from messages.schemas import Distribution, Metric, MetricList
from messages.timestamps import Duration, Timestamp

logger = logging.getLogger(__name__)

TYPE_KEY = '__type__'
VALUE_KEY = 'value'


@dataclass(frozen=True)
class NativeType:
    tag: str
    cls: type
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]


_BY_TAG: dict[str, NativeType] = {}
_BY_CLASS: dict[type, NativeType] = {}


def register_type(
    tag: str,
    cls: type,
    encode: Callable[[Any], Any],
    decode: Callable[[Any], Any],
) -> None:
    if tag in _BY_TAG and _BY_TAG[tag].cls is not cls:
        raise ValueError(f'Tag {tag!r} already registered for {_BY_TAG[tag].cls}')
    native_type = NativeType(tag, cls, encode, decode)
    _BY_TAG[tag] = native_type
    _BY_CLASS[cls] = native_type


register_type('time', Timestamp, lambda t: t.nanos, Timestamp)
register_type('duration', Duration, lambda d: d.nanos, Duration)
register_type(
    'distribution',
    Distribution,
    lambda d: d.model_dump(by_alias=True),
    Distribution.model_validate,
)


def _default(obj: Any) -> Any:
    native_type = _BY_CLASS.get(type(obj))
    if native_type is None:
        raise TypeError(f'Type is not registered for native encoding: {type(obj)}')
    return {TYPE_KEY: native_type.tag, VALUE_KEY: native_type.encode(obj)}


def _revive(obj: Any) -> Any:
    if isinstance(obj, list):
        return [_revive(item) for item in obj]
    if isinstance(obj, dict):
        tag = obj.get(TYPE_KEY)
        if tag is not None:
            native_type = _BY_TAG.get(tag)
            if native_type is None:
                raise ValueError(f'Unknown native type tag: {tag!r}')
            return native_type.decode(obj[VALUE_KEY])
        return {key: _revive(value) for key, value in obj.items()}
    return obj


def _fields(metric: Metric) -> dict[str, Any]:
    # model_dump would turn Timestamp and Duration into plain dicts
    return {
        'path': metric.path,
        'description': metric.description,
        'unit': metric.unit.value,
        'kind': metric.kind.value,
        'subType': metric.sub_type.value,
        'bits': metric.bits,
        'value': metric.value,
        'timestamp': metric.timestamp,
        'groupId': metric.group_id,
    }


def dumps(metrics: Iterable[Metric]) -> bytes:
    return orjson.dumps(
        [_fields(metric) for metric in metrics],
        default=_default,
        option=orjson.OPT_PASSTHROUGH_DATACLASS,
    )


def loads(data: bytes | str) -> MetricList:
    raw = orjson.loads(data)
    if not isinstance(raw, list):
        raise ValueError(f'Expected a JSON array, got {type(raw).__name__}')
    metrics = MetricList.model_validate(_revive(raw))
    logger.debug('Decoded native metrics', extra={'count': len(metrics)})
    return metrics
