"""Routing result types."""

from __future__ import annotations

from dataclasses import dataclass

from solution_chat.persona.registry import ModeKey


@dataclass(frozen=True)
class RouteDecision:
    """Mode chosen for one request.

    ``confidence`` is advisory; ``None`` means the classifier gave no
    usable value (e.g. after a fallback).
    """

    mode: ModeKey
    confidence: float | None = None


@dataclass(frozen=True)
class RouteParse:
    """Outcome of parsing classifier output: a decision or an error, never both."""

    decision: RouteDecision | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.decision is not None

    def unwrap_or_default(self, default_mode: ModeKey) -> RouteDecision:
        """The parsed decision, or ``default_mode`` with unset confidence."""
        if self.decision is not None:
            return self.decision
        return RouteDecision(mode=default_mode, confidence=None)
