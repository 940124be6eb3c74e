from enum import Enum
from typing import Any

from messages.errors import UnsupportedKindError

_BITS = {
    'int8': 8,
    'int16': 16,
    'int32': 32,
    'int64': 64,
    'uint8': 8,
    'uint16': 16,
    'uint32': 32,
    'uint64': 64,
    'float32': 32,
    'float64': 64,
}


class Kind(str, Enum):
    """Declared type of a metric value.

    The member values are the strings used for ``kind`` and ``subType`` in
    the JSON payload. ``UNKNOWN`` is the empty string so that an unset sub
    type is omitted on the wire.
    """

    UNKNOWN = ''
    BOOL = 'bool'
    INT8 = 'int8'
    INT16 = 'int16'
    INT32 = 'int32'
    INT64 = 'int64'
    UINT8 = 'uint8'
    UINT16 = 'uint16'
    UINT32 = 'uint32'
    UINT64 = 'uint64'
    FLOAT32 = 'float32'
    FLOAT64 = 'float64'
    STRING = 'string'
    DIST = 'distribution'
    TIME = 'time'
    DURATION = 'duration'
    LIST = 'list'

    @classmethod
    def parse(cls, value: Any) -> 'Kind':
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise UnsupportedKindError(value)

    @property
    def bits(self) -> int:
        return _BITS.get(self.value, 0)

    @property
    def is_signed_integer(self) -> bool:
        return self.value.startswith('int')

    @property
    def is_unsigned_integer(self) -> bool:
        return self.value.startswith('uint')

    @property
    def is_float(self) -> bool:
        return self.value.startswith('float')

    @property
    def integer_bounds(self) -> tuple[int, int]:
        if self.is_signed_integer:
            half = 1 << (self.bits - 1)
            return -half, half - 1
        if self.is_unsigned_integer:
            return 0, (1 << self.bits) - 1
        raise UnsupportedKindError(self)

    @property
    def can_be_list_element(self) -> bool:
        return self not in (Kind.UNKNOWN, Kind.DIST, Kind.LIST)
