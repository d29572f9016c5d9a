"""Chat service entry point."""

import asyncio
import contextlib
import logging

from solution_chat.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


async def _serve() -> None:
    from solution_chat.persona.registry import load_registry
    from solution_chat.reply.orchestrator import ReplyOrchestrator
    from solution_chat.server import ChatServer

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is empty, every reply will be the fallback text")

    registry = load_registry(settings.persona_dir)
    server = ChatServer(ReplyOrchestrator(registry))
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    """Run the chat HTTP server until interrupted."""
    logger.info("Starting chat service on port %d...", settings.server_port)
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_serve())


if __name__ == "__main__":
    main()
