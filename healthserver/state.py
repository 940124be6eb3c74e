from dataclasses import dataclass
import logging
import threading

logger = logging.getLogger(__name__)

OK = 'OK'
NOT_READY = 'not ready'


class StatusContractError(AssertionError):
    """A failure status was set with an empty or reserved message."""


@dataclass(frozen=True)
class Status:
    # None means OK
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.message is None

    def __str__(self) -> str:
        return OK if self.message is None else self.message


class _StatusFlag:
    def __init__(self, name: str, initial: Status) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._status = initial

    def get(self) -> Status:
        with self._lock:
            return self._status

    def set(self, status: Status) -> None:
        with self._lock:
            previous, self._status = self._status, status
        if previous != status:
            logger.info(
                'Status changed',
                extra={'check': self.name, 'status': str(status)},
            )


def _failure(message: str) -> Status:
    if not message or message == OK:
        raise StatusContractError(f'{OK!r} status not permitted as a failure')
    return Status(message)


class HealthState:
    """Health and readiness of a process, as served on /healthz and /readiness.

    A new state is healthy but not ready. Each flag is guarded by its own
    lock so a reader always sees a status and message that belong together.
    """

    def __init__(self) -> None:
        self._health = _StatusFlag('health', Status())
        self._readiness = _StatusFlag('readiness', Status(NOT_READY))

    @property
    def health(self) -> Status:
        return self._health.get()

    @property
    def readiness(self) -> Status:
        return self._readiness.get()

    def set_healthy(self) -> None:
        self._health.set(Status())

    def set_not_healthy(self, message: str) -> None:
        self._health.set(_failure(message))

    def set_ready(self) -> None:
        self._readiness.set(Status())

    def set_not_ready(self, message: str) -> None:
        self._readiness.set(_failure(message))
