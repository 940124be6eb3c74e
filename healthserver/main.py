import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
import logging
import signal

from healthserver.config import settings
from healthserver.log_config_loader import setup_logging
from healthserver.server import HealthServer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(server: HealthServer) -> AsyncGenerator[None, None]:
    await server.start()
    server.state.set_ready()
    try:
        yield
    finally:
        logger.info('Shutting down...')
        server.state.set_not_ready('shutting down')
        await server.stop()
        logger.info('Shutdown complete')


async def serve() -> None:
    shutdown_event = asyncio.Event()

    for sig in [signal.SIGTERM, signal.SIGINT]:
        asyncio.get_running_loop().add_signal_handler(sig, shutdown_event.set)

    server = HealthServer(settings.HEALTH_SERVER_HOST, settings.HEALTH_SERVER_PORT)
    async with lifespan(server):
        await shutdown_event.wait()


def main() -> None:
    setup_logging(
        service_name=settings.SERVICE_NAME,
        level=settings.LOG_LEVEL,
        log_format=settings.LOG_FORMAT,
        version=settings.SERVICE_VERSION,
    )
    asyncio.run(serve())


if __name__ == '__main__':
    main()
