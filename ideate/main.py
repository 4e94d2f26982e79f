"""Ideate chat API entry point."""

import asyncio
import logging

from ideate.config import settings
from ideate.server import ChatServer

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


async def _serve() -> None:
    server = ChatServer()
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    """Start the chat API."""
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is empty; every reply will be the fallback message")
    if not settings.brave_search_api_key:
        logger.warning("BRAVE_SEARCH_API_KEY is empty; research will be skipped")

    logger.info("Starting Ideate chat API with model %s...", settings.chat_model)
    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
