"""Read-only persona fragment registry, built once at startup."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType

from solution_chat.persona import fragments

logger = logging.getLogger(__name__)


class ModeKey(StrEnum):
    """Closed set of persona/topic lenses."""

    EXECUTIVE = "executive"
    DIAGNOSTICS = "diagnostics"
    HR_ENABLEMENT = "hr_enablement"
    FACILITATION = "facilitation"
    TRAINING = "training"
    SALES_LIGHT = "sales_light"

    @classmethod
    def parse(cls, value: object) -> ModeKey | None:
        """Return the matching member, or None for anything outside the set."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


DEFAULT_MODE = ModeKey.EXECUTIVE

_BUILTIN_MODES: dict[ModeKey, str] = {
    ModeKey.EXECUTIVE: fragments.MODE_EXECUTIVE,
    ModeKey.DIAGNOSTICS: fragments.MODE_DIAGNOSTICS,
    ModeKey.HR_ENABLEMENT: fragments.MODE_HR_ENABLEMENT,
    ModeKey.FACILITATION: fragments.MODE_FACILITATION,
    ModeKey.TRAINING: fragments.MODE_TRAINING,
    ModeKey.SALES_LIGHT: fragments.MODE_SALES_LIGHT,
}


@dataclass(frozen=True)
class PersonaRegistry:
    """Static text blocks that make up the system instruction.

    Attributes:
        voice: Who the assistant is.
        style: Reply formatting rules.
        safety: Guardrails.
        shared_rules: Behaviour common to every mode.
        cta_policy: How to handle commercial questions.
        scaffold: Reply outline.
        closing: Non-disclosure and length cap.
        modes: One fragment per ``ModeKey``.
        default_mode: Mode used when none or an invalid one is selected.
    """

    voice: str = fragments.VOICE
    style: str = fragments.STYLE
    safety: str = fragments.SAFETY
    shared_rules: str = fragments.SHARED_RULES
    cta_policy: str = fragments.CTA_POLICY
    scaffold: str = fragments.SCAFFOLD
    closing: str = fragments.CLOSING
    modes: Mapping[ModeKey, str] = field(default_factory=lambda: dict(_BUILTIN_MODES))
    default_mode: ModeKey = DEFAULT_MODE

    def __post_init__(self) -> None:
        missing = [key for key in ModeKey if key not in self.modes]
        if missing:
            msg = f"Persona registry is missing modes: {', '.join(missing)}"
            raise ValueError(msg)
        object.__setattr__(self, "modes", MappingProxyType(dict(self.modes)))

    def mode_fragment(self, mode: ModeKey | str | None) -> str:
        """Fragment for ``mode``; the default mode's fragment if invalid or None."""
        key = ModeKey.parse(mode) or self.default_mode
        return self.modes[key]

    def mode_digest(self) -> str:
        """All mode fragments condensed onto a single line."""
        parts = [f"[{key.value}] {' '.join(text.split())}" for key, text in self.modes.items()]
        return " / ".join(parts)


def _read_fragment(directory: Path, filename: str, default: str) -> str:
    """Read an override markdown file, returning ``default`` if missing or empty."""
    path = directory / filename
    if path.exists():
        text = path.read_text(encoding="utf-8").strip()
        if text:
            logger.info("Persona override loaded: %s", path)
            return text
    return default


def load_registry(persona_dir: Path | None = None) -> PersonaRegistry:
    """Build the registry, applying markdown overrides from ``persona_dir``.

    Recognised files: ``voice.md``, ``style.md``, ``safety.md``,
    ``shared_rules.md``, ``cta_policy.md``, ``scaffold.md``, ``closing.md``
    and ``modes/<mode>.md``. Missing files keep the built-in text.
    """
    if persona_dir is None:
        return PersonaRegistry()

    if not persona_dir.is_dir():
        logger.warning("Persona directory %s not found, using built-in fragments", persona_dir)
        return PersonaRegistry()

    modes_dir = persona_dir / "modes"
    modes = {
        key: _read_fragment(modes_dir, f"{key.value}.md", text)
        for key, text in _BUILTIN_MODES.items()
    }
    return PersonaRegistry(
        voice=_read_fragment(persona_dir, "voice.md", fragments.VOICE),
        style=_read_fragment(persona_dir, "style.md", fragments.STYLE),
        safety=_read_fragment(persona_dir, "safety.md", fragments.SAFETY),
        shared_rules=_read_fragment(persona_dir, "shared_rules.md", fragments.SHARED_RULES),
        cta_policy=_read_fragment(persona_dir, "cta_policy.md", fragments.CTA_POLICY),
        scaffold=_read_fragment(persona_dir, "scaffold.md", fragments.SCAFFOLD),
        closing=_read_fragment(persona_dir, "closing.md", fragments.CLOSING),
        modes=modes,
    )
