"""Reply pipeline: route, assemble persona, complete, reshape, attach CTA."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from solution_chat.config import settings
from solution_chat.llm.client import complete_chat
from solution_chat.llm.errors import CompletionError, ProviderTimeout
from solution_chat.persona.assembler import assemble
from solution_chat.persona.registry import PersonaRegistry, load_registry
from solution_chat.reply.cta import append_cta, needs_contact, strip_marker
from solution_chat.reply.models import FormattedReply, Message, last_user_utterance
from solution_chat.reply.reshape import reshape
from solution_chat.routing.router import ModeRouter

if TYPE_CHECKING:
    from solution_chat.routing.models import RouteDecision

logger = logging.getLogger(__name__)


class ReplyOrchestrator:
    """Turns a conversation history into one formatted reply.

    With ``use_explicit_routing`` the latest user message is first
    classified by a :class:`ModeRouter` and only that mode's fragment goes
    into the system instruction. Without it, no routing call is made and
    every mode is embedded as an internal hint instead.

    ``confidence_threshold`` gates routed decisions: a decision whose
    confidence is unset or below the threshold is discarded in favour of
    the all-modes hint. ``None`` trusts every decision.

    ``timeout`` bounds the whole request: time spent routing is deducted
    from what the completion call may use.

    Provider failures never reach the caller; they collapse into the
    configured fallback reply.
    """

    def __init__(
        self,
        registry: PersonaRegistry | None = None,
        *,
        use_explicit_routing: bool | None = None,
        router: ModeRouter | None = None,
        confidence_threshold: float | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        fallback_text: str | None = None,
    ) -> None:
        self._registry = registry or load_registry(settings.persona_dir)
        if use_explicit_routing is None:
            use_explicit_routing = router is not None or settings.use_explicit_routing
        self._router: ModeRouter | None = None
        if use_explicit_routing:
            self._router = router or ModeRouter(self._registry)
        self._threshold = (
            confidence_threshold
            if confidence_threshold is not None
            else settings.router_confidence_threshold
        )
        self._model = model
        self._temperature = temperature if temperature is not None else settings.chat_temperature
        self._max_tokens = max_tokens if max_tokens is not None else settings.chat_max_tokens
        self._timeout = timeout if timeout is not None else settings.completion_timeout_seconds
        self._fallback_text = fallback_text or settings.fallback_reply()

    @property
    def routing_enabled(self) -> bool:
        return self._router is not None

    @property
    def fallback_text(self) -> str:
        return self._fallback_text

    def _trusts(self, decision: RouteDecision) -> bool:
        if self._threshold is None:
            return True
        return decision.confidence is not None and decision.confidence >= self._threshold

    async def build_system_instruction(self, utterance: str) -> str:
        """Route (when enabled) and assemble the system instruction."""
        if self._router is None:
            return assemble(self._registry, hint_all_modes=True)

        decision = await self._router.route(utterance)
        if not self._trusts(decision):
            logger.info(
                "Route confidence %s below threshold %s, using all-modes hint",
                decision.confidence,
                self._threshold,
            )
            return assemble(self._registry, hint_all_modes=True)
        return assemble(self._registry, decision.mode)

    async def handle(self, history: list[Message]) -> FormattedReply:
        """Produce the reply for ``history`` (most recent message last)."""
        utterance = last_user_utterance(history)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout

        try:
            system = await self.build_system_instruction(utterance)
            remaining = deadline - loop.time()
            if remaining <= 0:
                msg = f"Routing used the whole {self._timeout:.1f}s budget"
                raise ProviderTimeout(msg)
            raw = await complete_chat(
                [m.to_api() for m in history],
                system=system,
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                timeout=remaining,
            )
        except CompletionError as exc:
            logger.warning("Completion failed, returning fallback reply: %s", exc)
            return FormattedReply(text=self._fallback_text)
        except Exception:
            logger.exception("Unexpected error while generating reply")
            return FormattedReply(text=self._fallback_text)

        text = reshape(strip_marker(raw))
        cta_requested = needs_contact(utterance)
        if cta_requested:
            text = append_cta(text)

        logger.info(
            "Reply generated: history=%d, chars=%d, cta=%s",
            len(history),
            len(text),
            cta_requested,
        )
        return FormattedReply(text=text, cta_requested=cta_requested)
