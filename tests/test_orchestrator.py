"""End-to-end tests for the reply orchestrator with a mocked provider."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai

from solution_chat.config import settings
from solution_chat.persona import fragments
from solution_chat.persona.assembler import MODE_HINT_LABEL
from solution_chat.persona.registry import ModeKey, PersonaRegistry
from solution_chat.reply.cta import CTA_MARKER
from solution_chat.reply.models import FormattedReply, Message, Role
from solution_chat.reply.orchestrator import ReplyOrchestrator
from solution_chat.routing.models import RouteDecision
from solution_chat.routing.router import ModeRouter

GREETING = Message(role=Role.ASSISTANT, content="こんにちは。今日はどの課題からご一緒しますか？")


def _response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


def _history(*user_messages: str) -> list[Message]:
    return [GREETING, *(Message(role=Role.USER, content=m) for m in user_messages)]


def _orchestrator(registry: PersonaRegistry, **kwargs) -> ReplyOrchestrator:
    kwargs.setdefault("use_explicit_routing", False)
    return ReplyOrchestrator(registry, **kwargs)


# -- Scenarios ---------------------------------------------------------------


async def test_pricing_question_gets_cta(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response(
        "料金は内容により異なります。詳しくは無料相談でご案内します。"
    )

    reply = await _orchestrator(registry).handle(_history("料金について教えてください"))

    assert reply.cta_requested is True
    assert reply.text == (
        "料金は内容により異なります。\n詳しくは無料相談でご案内します。"
        f"\n\n---\n{CTA_MARKER}"
    )


async def test_greeting_gets_no_cta(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response("こんにちは。")

    reply = await _orchestrator(registry).handle(_history("こんにちは"))

    assert reply == FormattedReply(text="こんにちは。", cta_requested=False)
    assert CTA_MARKER not in reply.text


async def test_model_markdown_is_reshaped(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response(
        "# Overview\n1. First\n2. Second"
    )

    reply = await _orchestrator(registry).handle(_history("こんにちは"))

    assert reply.text.split("\n") == ["Overview", "・ First", "・ Second"]


async def test_timeout_returns_fallback(openai_client, registry) -> None:
    async def _slow(**kwargs):
        await asyncio.sleep(1)
        return _response("too late")

    openai_client.chat.completions.create.side_effect = _slow

    reply = await _orchestrator(registry, timeout=0.01).handle(_history("料金について"))

    assert reply.text == settings.fallback_reply()
    assert reply.cta_requested is False


async def test_provider_error_returns_fallback(openai_client, registry) -> None:
    openai_client.chat.completions.create.side_effect = openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    )

    reply = await _orchestrator(registry, fallback_text="しばらくお待ちください").handle(
        _history("こんにちは")
    )

    assert reply == FormattedReply(text="しばらくお待ちください")


async def test_fallback_mentions_contact_details(registry) -> None:
    text = _orchestrator(registry).fallback_text
    assert settings.contact_phone in text
    assert settings.contact_form_url in text


# -- Pipeline details --------------------------------------------------------


async def test_empty_completion_is_not_an_error(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response(None)

    reply = await _orchestrator(registry).handle(_history("こんにちは"))

    assert reply == FormattedReply(text="", cta_requested=False)


async def test_model_cannot_emit_marker(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response(f"承知しました。{CTA_MARKER}")

    reply = await _orchestrator(registry).handle(_history("こんにちは"))

    assert CTA_MARKER not in reply.text
    assert reply.text == "承知しました。"


async def test_cta_follows_user_message_not_reply(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response("料金表をご覧ください。")

    reply = await _orchestrator(registry).handle(_history("こんにちは"))

    assert reply.cta_requested is False


async def test_latest_user_message_drives_cta(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response("はい。")
    history = [
        *_history("見積をお願いします", "やっぱり雑談です"),
        Message(role=Role.ASSISTANT, content="承知しました。"),
    ]

    reply = await _orchestrator(registry).handle(history)

    assert reply.cta_requested is False


async def test_no_user_message(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response("ようこそ。")

    reply = await _orchestrator(registry).handle([])

    assert reply == FormattedReply(text="ようこそ。")


async def test_system_instruction_prepended_to_history(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response("はい。")
    history = _history("若手の主体性が弱い。まず何から？")

    await _orchestrator(registry).handle(history)

    openai_client.chat.completions.create.assert_awaited_once()
    call_kwargs = openai_client.chat.completions.create.call_args.kwargs
    system, *rest = call_kwargs["messages"]
    assert system["role"] == "system"
    assert MODE_HINT_LABEL in system["content"]
    assert rest == [m.to_api() for m in history]
    assert call_kwargs["model"] == "gpt-4o-mini"
    assert call_kwargs["temperature"] == 0.7
    assert "max_tokens" not in call_kwargs


async def test_completion_options_forwarded(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response("はい。")

    await _orchestrator(registry, model="gpt-4o", temperature=0.2, max_tokens=500).handle(
        _history("こんにちは")
    )

    call_kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert call_kwargs["model"] == "gpt-4o"
    assert call_kwargs["temperature"] == 0.2
    assert call_kwargs["max_tokens"] == 500


# -- Routing -----------------------------------------------------------------


async def test_explicit_routing_selects_mode(openai_client, registry) -> None:
    openai_client.chat.completions.create.side_effect = [
        _response('{"mode": "sales_light", "confidence": 0.95}'),
        _response("無料相談でご案内します。"),
    ]
    orchestrator = _orchestrator(registry, use_explicit_routing=True)

    reply = await orchestrator.handle(_history("導入の流れを知りたい"))

    assert orchestrator.routing_enabled
    assert openai_client.chat.completions.create.await_count == 2
    chat_kwargs = openai_client.chat.completions.create.call_args_list[1].kwargs
    system = chat_kwargs["messages"][0]["content"]
    assert fragments.MODE_SALES_LIGHT in system
    assert MODE_HINT_LABEL not in system
    assert reply.cta_requested is True


async def test_routing_disabled_makes_one_call(openai_client, registry) -> None:
    openai_client.chat.completions.create.return_value = _response("はい。")
    orchestrator = _orchestrator(registry)

    await orchestrator.handle(_history("研修の定着"))

    assert not orchestrator.routing_enabled
    assert openai_client.chat.completions.create.await_count == 1


async def test_low_confidence_falls_back_to_hint(openai_client, registry) -> None:
    router = MagicMock(spec=ModeRouter)
    router.route = AsyncMock(return_value=RouteDecision(mode=ModeKey.TRAINING, confidence=0.3))
    openai_client.chat.completions.create.return_value = _response("はい。")

    orchestrator = _orchestrator(
        registry, use_explicit_routing=True, router=router, confidence_threshold=0.5
    )
    await orchestrator.handle(_history("研修の定着"))

    router.route.assert_awaited_once_with("研修の定着")
    system = openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert MODE_HINT_LABEL in system


async def test_confident_decision_is_used(openai_client, registry) -> None:
    router = MagicMock(spec=ModeRouter)
    router.route = AsyncMock(return_value=RouteDecision(mode=ModeKey.TRAINING, confidence=0.8))
    openai_client.chat.completions.create.return_value = _response("はい。")

    orchestrator = _orchestrator(
        registry, use_explicit_routing=True, router=router, confidence_threshold=0.5
    )
    await orchestrator.handle(_history("研修の定着"))

    system = openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert fragments.MODE_TRAINING in system
    assert MODE_HINT_LABEL not in system


async def test_router_given_enables_routing(registry) -> None:
    router = MagicMock(spec=ModeRouter)
    orchestrator = ReplyOrchestrator(registry, router=router)
    assert orchestrator.routing_enabled


async def test_router_failure_still_answers(openai_client, registry) -> None:
    openai_client.chat.completions.create.side_effect = [
        openai.APIConnectionError(
            request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        ),
        _response("お答えします。"),
    ]

    reply = await _orchestrator(registry, use_explicit_routing=True).handle(
        _history("会議がまとまらない")
    )

    assert reply.text == "お答えします。"
    system = openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert registry.modes[registry.default_mode] in system


async def test_routing_time_counts_against_timeout(registry) -> None:
    async def _slow_route(utterance: str) -> RouteDecision:
        await asyncio.sleep(0.2)
        return RouteDecision(mode=ModeKey.TRAINING, confidence=0.9)

    router = MagicMock(spec=ModeRouter)
    router.route = AsyncMock(side_effect=_slow_route)
    complete = AsyncMock(return_value="はい。")

    orchestrator = _orchestrator(registry, use_explicit_routing=True, router=router, timeout=0.3)
    with patch("solution_chat.reply.orchestrator.complete_chat", complete):
        reply = await orchestrator.handle(_history("研修の定着"))

    assert reply.text == "はい。"
    remaining = complete.call_args.kwargs["timeout"]
    assert 0 < remaining <= 0.1 + 1e-6


async def test_routing_exhausting_budget_returns_fallback(registry) -> None:
    async def _slow_route(utterance: str) -> RouteDecision:
        await asyncio.sleep(0.05)
        return RouteDecision(mode=ModeKey.TRAINING, confidence=0.9)

    router = MagicMock(spec=ModeRouter)
    router.route = AsyncMock(side_effect=_slow_route)
    complete = AsyncMock(return_value="はい。")

    orchestrator = _orchestrator(registry, use_explicit_routing=True, router=router, timeout=0.01)
    with patch("solution_chat.reply.orchestrator.complete_chat", complete):
        reply = await orchestrator.handle(_history("研修の定着"))

    assert reply == FormattedReply(text=orchestrator.fallback_text)
    complete.assert_not_awaited()
