"""Connects to a project and logs every cloud variable update it sees."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path


def main() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))

    # Lazy import after adjusting sys.path
    from cloudvars import CloudConnection, CloudListener, get_settings  # type: ignore

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger("cloudvars.watch")

    class _Printer(CloudListener):
        def on_connected(self) -> None:
            logger.info("Connected to project %s", settings.project_id)

        def on_reconnecting(self) -> None:
            logger.info("Connection lost, trying to reconnect...")

        def on_set(self, name, value) -> None:
            logger.info("%s was set to %r", name, value)

    async def _watch() -> None:
        async with CloudConnection(settings, listeners=[_Printer()]) as connection:
            await connection.wait_closed()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
