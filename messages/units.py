from enum import Enum


class Unit(str, Enum):
    NONE = ''
    MILLISECOND = 'milliseconds'
    SECOND = 'seconds'
    CELSIUS = 'celsius'
    BYTE = 'bytes'
    BYTE_PER_SECOND = 'bytesPerSecond'
