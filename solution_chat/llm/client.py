"""Async OpenAI chat-completion client with a bounded wait."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from solution_chat.config import settings
from solution_chat.llm.errors import ProviderError, ProviderTimeout
from solution_chat.llm.models import chat_model

logger = logging.getLogger(__name__)

_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI:
    """Lazily initialize the OpenAI client.

    Retries are disabled: a failed attempt goes straight to the caller's
    fallback handling.
    """
    global _client  # noqa: PLW0603
    if _client is None:
        kwargs: dict[str, Any] = {
            "api_key": settings.openai_api_key,
            "max_retries": 0,
            "timeout": httpx.Timeout(settings.completion_timeout_seconds, connect=5.0),
        }
        if settings.openai_base_url:
            kwargs["base_url"] = settings.openai_base_url
        _client = AsyncOpenAI(**kwargs)
    return _client


async def _create(kwargs: dict[str, Any]) -> str:
    client = _get_client()
    try:
        response = await client.chat.completions.create(**kwargs)
    except openai.APITimeoutError as exc:
        raise ProviderTimeout(f"Completion request timed out (model={kwargs['model']})") from exc
    except openai.APIError as exc:
        raise ProviderError(f"Completion request failed: {exc}") from exc

    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


async def complete_chat(
    messages: list[dict[str, str]],
    *,
    system: str | None = None,
    model: str | None = None,
    temperature: float = 0.7,
    max_tokens: int | None = None,
    json_object: bool = False,
    timeout: float | None = None,
) -> str:
    """Single-shot chat completion. Returns the first choice's text.

    The system instruction, when given, is prepended to ``messages``.
    ``json_object`` constrains the response to a single JSON object.
    With ``timeout`` set, the call races a timer and the loser is
    cancelled; expiry raises :class:`ProviderTimeout`.

    Returns an empty string when the provider returns no content.
    """
    api_messages: list[dict[str, str]] = []
    if system is not None:
        api_messages.append({"role": "system", "content": system})
    api_messages.extend(messages)

    kwargs: dict[str, Any] = {
        "model": model or chat_model(),
        "temperature": temperature,
        "messages": api_messages,
    }
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if json_object:
        kwargs["response_format"] = {"type": "json_object"}

    if timeout is None:
        return await _create(kwargs)

    try:
        return await asyncio.wait_for(_create(kwargs), timeout=timeout)
    except TimeoutError as exc:
        logger.warning("Completion call exceeded %.1fs (model=%s)", timeout, kwargs["model"])
        raise ProviderTimeout(f"No completion within {timeout:.1f}s") from exc
