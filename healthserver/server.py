from collections.abc import Awaitable, Callable
import logging

from aiohttp import web

from healthserver.state import HealthState, Status

logger = logging.getLogger(__name__)


class HealthServer:
    """Async HTTP server answering /healthz and /readiness."""

    def __init__(self, host: str, port: int, state: HealthState | None = None) -> None:
        self.host = host
        self.port = port
        self.state = state or HealthState()
        self._runner: web.AppRunner | None = None

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(
            '/healthz', self._handler(lambda: self.state.health), allow_head=False
        )
        app.router.add_get(
            '/readiness', self._handler(lambda: self.state.readiness), allow_head=False
        )
        return app

    async def start(self) -> None:
        if self._runner is not None:
            return
        self._runner = web.AppRunner(self.make_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(
            'Health server started', extra={'host': self.host, 'port': self.port}
        )

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info('Health server stopped')

    @staticmethod
    def _handler(
        read: Callable[[], Status],
    ) -> Callable[[web.Request], Awaitable[web.Response]]:
        async def handle(_request: web.Request) -> web.Response:
            status = read()
            return web.Response(text=str(status), status=200 if status.ok else 503)

        return handle
