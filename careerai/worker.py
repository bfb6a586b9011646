"""Standalone background worker.

Continuously drains pending jobs without running the HTTP server. On
SIGINT/SIGTERM it stops polling and gives the in-flight batch the
configured grace period before exiting.
"""

import asyncio
import logging
import signal
from typing import Optional

from careerai.config import Settings, settings as default_settings
from careerai.logging_config import setup_logging
from careerai.services import build_services

logger = logging.getLogger(__name__)


async def run_worker(settings: Settings, stop_event: Optional[asyncio.Event] = None) -> None:
    setup_logging(settings.log_level)
    logger.info(
        "Starting job worker (poll interval %dms, batch size %d)",
        settings.job_poll_interval_ms,
        settings.job_batch_size,
    )

    services = build_services(settings)
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    await services.poller.start()
    await stop_event.wait()

    logger.info("Shutting down job worker...")
    await services.poller.stop(settings.shutdown_grace_seconds)


def main() -> None:
    asyncio.run(run_worker(default_settings))


if __name__ == "__main__":
    main()
