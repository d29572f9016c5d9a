"""Single-shot mode classification through the completion provider."""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from solution_chat.config import settings
from solution_chat.llm.client import complete_chat
from solution_chat.llm.errors import CompletionError
from solution_chat.llm.models import router_model
from solution_chat.persona.registry import ModeKey, PersonaRegistry
from solution_chat.routing.models import RouteDecision, RouteParse

logger = logging.getLogger(__name__)

ROUTER_INSTRUCTION = """\
あなたは相談内容の分類器です。ユーザーの相談を次のいずれか一つのmodeに分類してください。
- executive: 意思決定、投資判断、経営戦略、組織方針に関する相談
- diagnostics: 組織診断、エンゲージメント、離職、部署間の課題把握に関する相談
- hr_enablement: 採用、オンボーディング、若手や新人の定着に関する相談
- facilitation: 会議設計、合意形成、対話の場づくりに関する相談
- training: 研修設計、学習の定着、現場への持ち帰りに関する相談
- sales_light: 料金、見積、サービス内容、導入の流れなどの問い合わせ
出力は次の形式のJSONオブジェクト一つだけにしてください。説明文は不要です。
{"mode": "<上記のいずれか>", "confidence": <0から1の数値>}"""


def _extract_object(text: str) -> Any:
    """Decode ``text`` as JSON, falling back to its outermost ``{...}`` span."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        return None
    try:
        return json.loads(text[start:end])
    except json.JSONDecodeError:
        return None


def _coerce_confidence(value: Any) -> float | None:
    """Clamp a numeric confidence into [0, 1]; None for anything unusable."""
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    return min(1.0, max(0.0, number))


def parse_route_output(raw: str) -> RouteParse:
    """Parse classifier output into a decision or an explicit error.

    Tolerates markdown fences and surrounding prose. Never raises.
    """
    data = _extract_object(raw.strip())
    if not isinstance(data, dict):
        return RouteParse(error="classifier output is not a JSON object")

    mode = ModeKey.parse(data.get("mode"))
    if mode is None:
        return RouteParse(error=f"unknown mode: {data.get('mode')!r}")

    return RouteParse(
        decision=RouteDecision(mode=mode, confidence=_coerce_confidence(data.get("confidence")))
    )


class ModeRouter:
    """Classifies a user utterance into one of the fixed modes.

    One provider call per request, no retry. Malformed output and
    transport failures both degrade to the registry's default mode.
    """

    def __init__(
        self,
        registry: PersonaRegistry,
        *,
        model: str | None = None,
        timeout: float | None = None,
        max_input_chars: int | None = None,
    ) -> None:
        self._registry = registry
        self._model = model
        self._timeout = timeout if timeout is not None else settings.router_timeout_seconds
        self._max_input_chars = max_input_chars or settings.router_max_input_chars

    @property
    def default_mode(self) -> ModeKey:
        return self._registry.default_mode

    async def route(self, utterance: str) -> RouteDecision:
        """Classify ``utterance``. Never raises."""
        text = utterance[: self._max_input_chars]
        try:
            raw = await complete_chat(
                [{"role": "user", "content": text}],
                system=ROUTER_INSTRUCTION,
                model=self._model or router_model(),
                temperature=settings.router_temperature,
                json_object=True,
                timeout=self._timeout,
            )
        except CompletionError as exc:
            logger.warning("Mode routing failed, using default mode %s: %s", self.default_mode, exc)
            return RouteDecision(mode=self.default_mode)

        parsed = parse_route_output(raw)
        if not parsed.success:
            logger.warning("Malformed router output (%s), using default mode", parsed.error)
        decision = parsed.unwrap_or_default(self.default_mode)
        logger.info("Routed to mode=%s confidence=%s", decision.mode, decision.confidence)
        return decision
