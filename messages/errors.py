from typing import Any


class MessagesError(Exception):
    pass


class MetricNotFoundError(MessagesError, LookupError):
    def __init__(self, path: str):
        super().__init__(f'No metric found: {path!r}')
        self.path = path


class UnsupportedShapeError(MessagesError, ValueError):
    pass


class UnsupportedKindError(UnsupportedShapeError):
    def __init__(self, kind: Any, sub_type: Any = None):
        if sub_type is None:
            message = f'Unsupported kind: {kind!r}'
        else:
            message = f'Unsupported kind: {kind!r} with sub type {sub_type!r}'
        super().__init__(message)
        self.kind = kind
        self.sub_type = sub_type


class MalformedTimeLiteralError(UnsupportedShapeError):
    def __init__(self, literal: Any):
        super().__init__(f'Malformed time/duration literal: {literal!r}')
        self.literal = literal


class ValueShapeError(UnsupportedShapeError):
    def __init__(self, kind: Any, value: Any, reason: str | None = None):
        message = f'Value {value!r} does not fit kind {kind!r}'
        if reason:
            message = f'{message}: {reason}'
        super().__init__(message)
        self.kind = kind
        self.value = value
