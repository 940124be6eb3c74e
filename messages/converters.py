"""Conversion between the native and JSON representations of metric values.

Kind                 native value            JSON value
-------------------  ----------------------  --------------------------------
BOOL                 bool                    bool
INTn / UINTn         int                     int
FLOATn               float                   float
STRING               str                     str
DIST                 Distribution | None     Distribution | None
TIME                 Timestamp               '<seconds>.<9 digits>'
DURATION             Duration                '<seconds>.<9 digits>', signed
LIST of X            list of native X        list of JSON X

Each kind has one ``ValueCodec`` registered below; list codecs are derived
from the codec of their element kind. A metric's ``timestamp`` follows the
TIME rule with ``None`` and ``''`` meaning no timestamp.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
import math
from typing import Any

from messages.errors import UnsupportedKindError, ValueShapeError
from messages.schemas import Distribution, Metric
from messages.timestamps import Duration, Timestamp
from messages.types import Kind

Transform = Callable[[Any], Any]


@dataclass(frozen=True)
class ValueCodec:
    kind: Kind
    to_native: Transform
    to_json: Transform
    zero: Callable[[], Any]


_CODECS: dict[Kind, ValueCodec] = {}


def register_codec(codec: ValueCodec) -> None:
    _CODECS[codec.kind] = codec


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueShapeError(Kind.BOOL, value)
    return value


def _integer(kind: Kind) -> Transform:
    lo, hi = kind.integer_bounds

    def check(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueShapeError(kind, value)
        if not lo <= value <= hi:
            raise ValueShapeError(kind, value, f'outside [{lo}, {hi}]')
        return value

    return check


def _floating(kind: Kind, finite: bool = False) -> Transform:
    def check(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValueShapeError(kind, value)
        if finite and not math.isfinite(value):
            raise ValueShapeError(kind, value, 'JSON cannot carry non-finite floats')
        return float(value)

    return check


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueShapeError(Kind.STRING, value)
    return value


def _time_to_json(value: Any) -> str:
    if isinstance(value, datetime):
        value = Timestamp.from_datetime(value)
    if not isinstance(value, Timestamp):
        raise ValueShapeError(Kind.TIME, value)
    return value.format()


def _duration_to_json(value: Any) -> str:
    if isinstance(value, timedelta):
        value = Duration.from_timedelta(value)
    if not isinstance(value, Duration):
        raise ValueShapeError(Kind.DURATION, value)
    return value.format()


def _distribution(value: Any) -> Distribution | None:
    if value is None or isinstance(value, Distribution):
        return value
    if isinstance(value, dict):
        return Distribution.model_validate(value)
    raise ValueShapeError(Kind.DIST, value)


def _register_defaults() -> None:
    register_codec(ValueCodec(Kind.BOOL, _bool, _bool, lambda: False))
    for kind in Kind:
        if kind.is_signed_integer or kind.is_unsigned_integer:
            check = _integer(kind)
            register_codec(ValueCodec(kind, check, check, lambda: 0))
        elif kind.is_float:
            register_codec(
                ValueCodec(
                    kind, _floating(kind), _floating(kind, finite=True), lambda: 0.0
                )
            )
    register_codec(ValueCodec(Kind.STRING, _string, _string, lambda: ''))
    register_codec(
        ValueCodec(Kind.DIST, _distribution, _distribution, lambda: None)
    )
    register_codec(
        ValueCodec(Kind.TIME, Timestamp.parse, _time_to_json, lambda: Timestamp(0))
    )
    register_codec(
        ValueCodec(
            Kind.DURATION, Duration.parse, _duration_to_json, lambda: Duration(0)
        )
    )


_register_defaults()


def _each(kind: Kind, sub_type: Kind, transform: Transform) -> Transform:
    def convert(values: Any) -> list[Any]:
        if not isinstance(values, list | tuple):
            raise ValueShapeError(kind, values, f'expected a list of {sub_type.value}')
        return [transform(v) for v in values]

    return convert


def _list_codec(sub_type: Kind) -> ValueCodec:
    element = _CODECS[sub_type]
    return ValueCodec(
        Kind.LIST,
        _each(Kind.LIST, sub_type, element.to_native),
        _each(Kind.LIST, sub_type, element.to_json),
        list,
    )


_LIST_CODECS: dict[Kind, ValueCodec] = {
    kind: _list_codec(kind) for kind in _CODECS if kind.can_be_list_element
}


def codec_for(kind: Any, sub_type: Any = Kind.UNKNOWN) -> ValueCodec:
    kind = Kind.parse(kind)
    if kind is Kind.LIST:
        try:
            return _LIST_CODECS[Kind.parse(sub_type)]
        except (UnsupportedKindError, KeyError):
            raise UnsupportedKindError(kind, sub_type) from None
    codec = _CODECS.get(kind)
    if codec is None:
        raise UnsupportedKindError(kind)
    return codec


def as_json(
    value: Any, kind: Any, sub_type: Any = Kind.UNKNOWN
) -> tuple[Any, Kind, Kind]:
    """Return the JSON form of value along with its kind and sub type.

    The returned sub type is ``Kind.UNKNOWN`` unless kind is ``Kind.LIST``.
    """
    codec = codec_for(kind, sub_type)
    json_sub_type = Kind.parse(sub_type) if codec.kind is Kind.LIST else Kind.UNKNOWN
    return codec.to_json(value), codec.kind, json_sub_type


def as_native(value: Any, kind: Any, sub_type: Any = Kind.UNKNOWN) -> Any:
    return codec_for(kind, sub_type).to_native(value)


def _timestamp_to_native(timestamp: Any) -> Timestamp | None:
    if timestamp is None or timestamp == '':
        return None
    return Timestamp.parse(timestamp)


def _timestamp_to_json(timestamp: Any) -> str:
    if timestamp is None:
        return ''
    return _time_to_json(timestamp)


def to_native(metric: Metric) -> Metric:
    """Rewrite metric in place into the native representation.

    On error the metric is left untouched.
    """
    value = as_native(metric.value, metric.kind, metric.sub_type)
    timestamp = _timestamp_to_native(metric.timestamp)
    metric.value = value
    metric.timestamp = timestamp
    return metric


def to_json(metric: Metric) -> Metric:
    """Rewrite metric in place into the JSON representation.

    On error the metric is left untouched.
    """
    value, _, _ = as_json(metric.value, metric.kind, metric.sub_type)
    timestamp = _timestamp_to_json(metric.timestamp)
    metric.value = value
    metric.timestamp = timestamp
    return metric


def zero_value(kind: Any) -> Any:
    """Canonical empty native value of kind.

    ``Kind.DIST`` yields ``None``: no distribution yet, as opposed to an
    empty ``Distribution()``.
    """
    kind = Kind.parse(kind)
    if kind is Kind.LIST:
        return []
    return codec_for(kind).zero()
