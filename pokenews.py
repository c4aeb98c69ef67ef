#!/usr/bin/env python3
"""
PokeNews - Team Rocket Raid Countdown Service

Orchestration only:
- Connect to the NATS bus shared with the game server bridge
- Start the PokeNews plugin
- Wait for a shutdown signal, then stop in reverse order

All countdown logic lives in plugins/pokenews.

Usage:
    python pokenews.py config.yaml
"""

import asyncio
import logging
import signal
import sys
from typing import Any, Dict, Optional

from nats.aio.client import Client as NATS

from common.config import configure_logger, get_config
from plugins.pokenews import PokeNewsPlugin


logger = logging.getLogger(__name__)


class PokeNewsService:
    """
    PokeNews service orchestrator.

    Responsibilities:
    1. Connect to NATS
    2. Start the plugin
    3. Coordinate graceful shutdown
    """

    def __init__(self, conf: Dict[str, Any], nats_params: Dict[str, Any]):
        self.conf = conf
        self.nats_params = nats_params
        self.nats: Optional[NATS] = None
        self.plugin: Optional[PokeNewsPlugin] = None
        self._stop_event = asyncio.Event()

    async def start(self) -> None:
        """Start all components in order"""
        try:
            logger.info(f"Connecting to NATS: {', '.join(self.nats_params['servers'])}")
            self.nats = NATS()
            await self.nats.connect(**self.nats_params)

            logger.info("Starting PokeNews plugin...")
            self.plugin = PokeNewsPlugin(self.nats, self.conf.get('pokenews', {}))
            await self.plugin.initialize()

            logger.info("PokeNews started")

        except Exception as e:
            logger.error(f"Failed to start PokeNews: {e}", exc_info=True)
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop all components in reverse order"""
        logger.info("Shutting down PokeNews...")

        if self.plugin:
            await self.plugin.shutdown()
            self.plugin = None
        if self.nats and not self.nats.is_closed:
            await self.nats.close()

        logger.info("PokeNews stopped")

    def request_stop(self) -> None:
        self._stop_event.set()

    async def wait(self) -> None:
        """Block until request_stop() is called"""
        await self._stop_event.wait()


def configure_diagnostics(conf: Dict[str, Any]) -> None:
    """Send countdown debug diagnostics to their own log file

    Without a diagnostics_log_file they go to the root handler.
    """
    log_file = conf.get('logging', {}).get('diagnostics_log_file')
    if not log_file:
        return

    diagnostics = configure_logger(
        'pokenews.diagnostics',
        log_file=log_file,
        log_format='[%(asctime).19s] %(message)s',
    )
    diagnostics.propagate = False


async def run(config_file: Optional[str] = None) -> None:
    """Load config, run the service until SIGINT/SIGTERM"""
    conf, nats_params = get_config(config_file)
    configure_diagnostics(conf)

    service = PokeNewsService(conf, nats_params)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, service.request_stop)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C still
            # raises KeyboardInterrupt
            pass

    await service.start()
    try:
        await service.wait()
    finally:
        await service.stop()


def main():
    """Main entry point

    Returns:
        0 on normal exit or keyboard interrupt
        1 on error
    """
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logger.error(f"PokeNews exited with an error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
