"""Model selection for the completion and routing calls."""

import logging

from solution_chat.config import settings

logger = logging.getLogger(__name__)

MODEL_MAP: dict[str, str] = {
    "mini": "gpt-4o-mini",
    "4o": "gpt-4o",
    "4.1": "gpt-4.1",
    "4.1-mini": "gpt-4.1-mini",
}

# Reverse lookup: full model string → friendly name
FRIENDLY_NAMES: dict[str, str] = {v: k for k, v in MODEL_MAP.items()}


def _resolve(name_or_id: str) -> str | None:
    """Resolve a friendly name or full model ID. Returns full ID or None.

    Unknown IDs are passed through as-is so fine-tuned or newly released
    models can be selected without a code change.
    """
    name_or_id = name_or_id.strip()
    if not name_or_id or any(ch.isspace() for ch in name_or_id):
        return None
    return MODEL_MAP.get(name_or_id, name_or_id)


def friendly(model_id: str) -> str:
    """Return the friendly name for a model ID, or the ID itself."""
    return FRIENDLY_NAMES.get(model_id, model_id)


def chat_model() -> str:
    """Model for reply completions; ``mini`` when the setting is invalid."""
    model_id = _resolve(settings.chat_model)
    if model_id is None:
        logger.warning("Invalid chat_model %r, using %s", settings.chat_model, MODEL_MAP["mini"])
        return MODEL_MAP["mini"]
    return model_id


def router_model() -> str:
    """Model for mode routing; follows the chat model when the setting is invalid."""
    return _resolve(settings.router_model) or chat_model()
