"""Lightweight async HTTP server for the chat widget.

Exposes ``POST /api/solution-chat`` (conversation in, ``{"reply": ...}``
out) and ``GET /health``. Uses aiohttp's AppRunner/TCPSite for
non-blocking start/stop.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import Any

from aiohttp import web

from solution_chat.config import settings
from solution_chat.reply.models import parse_history
from solution_chat.reply.orchestrator import ReplyOrchestrator

logger = logging.getLogger(__name__)

ORCHESTRATOR_KEY = web.AppKey("orchestrator", ReplyOrchestrator)

_dumps = functools.partial(json.dumps, ensure_ascii=False)


async def _handle_chat(request: web.Request) -> web.Response:
    """POST /api/solution-chat: answer the latest user message."""
    try:
        payload: Any = await request.json()
    except Exception:
        logger.warning("Chat bad request: invalid JSON")
        return web.json_response({"error": "invalid JSON"}, status=400)

    try:
        history = parse_history(payload)
    except ValueError as exc:
        logger.warning("Chat bad request: %s", exc)
        return web.json_response({"error": str(exc)}, status=400)

    orchestrator = request.app[ORCHESTRATOR_KEY]
    reply = await orchestrator.handle(history)
    return web.json_response(reply.to_payload(), dumps=_dumps)


async def _health(request: web.Request) -> web.Response:
    """GET /health — basic liveness check."""
    return web.json_response({"status": "ok"})


def create_web_app(orchestrator: ReplyOrchestrator | None = None) -> web.Application:
    """Build the aiohttp Application with routes."""
    app = web.Application()
    app[ORCHESTRATOR_KEY] = orchestrator or ReplyOrchestrator()
    app.router.add_get("/health", _health)
    app.router.add_post("/api/solution-chat", _handle_chat)
    return app


class ChatServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(
        self,
        orchestrator: ReplyOrchestrator | None = None,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self.host = host or settings.server_host
        self.port = port if port is not None else settings.server_port
        self._orchestrator = orchestrator
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening for chat requests."""
        app = create_web_app(self._orchestrator)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(
            "Chat server listening on %s:%d (explicit routing: %s)",
            self.host,
            self.port,
            app[ORCHESTRATOR_KEY].routing_enabled,
        )

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Chat server stopped")
