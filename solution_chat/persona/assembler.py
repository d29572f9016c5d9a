"""System instruction assembly from persona fragments."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from solution_chat.persona.registry import ModeKey, PersonaRegistry

MODE_HINT_LABEL = "（内部参考・回答に出力しないこと）相談内容に最も近い視点を一つ選んで回答する:"


def assemble(
    registry: PersonaRegistry,
    mode: ModeKey | str | None = None,
    *,
    hint_all_modes: bool = False,
) -> str:
    """Build the system instruction for the completion call.

    Order: voice, style, safety, shared rules, then either the selected
    mode's fragment or (``hint_all_modes``) a one-line digest of every
    mode, then CTA policy, reply scaffold and the closing rules.

    An unknown or missing ``mode`` uses the registry's default mode.
    """
    if hint_all_modes:
        lens = f"{MODE_HINT_LABEL} {registry.mode_digest()}"
    else:
        lens = registry.mode_fragment(mode)

    return "\n".join(
        [
            registry.voice,
            registry.style,
            registry.safety,
            registry.shared_rules,
            lens,
            registry.cta_policy,
            registry.scaffold,
            registry.closing,
        ]
    )
