"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Chat service configuration. All values come from environment variables."""

    # OpenAI
    openai_api_key: str = Field(default="")
    openai_base_url: str = Field(default="")
    chat_model: str = Field(default="mini")
    router_model: str = Field(default="mini")

    # Completion call
    chat_temperature: float = Field(default=0.7)
    chat_max_tokens: int | None = Field(default=None)
    # Whole-request budget; routing time counts against it.
    completion_timeout_seconds: float = Field(default=9.0)

    # Mode routing
    use_explicit_routing: bool = Field(default=False)
    router_temperature: float = Field(default=0.0)
    router_timeout_seconds: float = Field(default=4.0)
    router_max_input_chars: int = Field(default=4000)
    router_confidence_threshold: float | None = Field(default=None, ge=0.0, le=1.0)

    # Persona overrides (markdown files); built-in fragments when unset
    persona_dir: Path | None = Field(default=None)

    # Contact details used by the fallback reply
    contact_phone: str = Field(default="06-6203-0222")
    contact_form_url: str = Field(default="https://solution-hr.com/contact")

    # HTTP server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8080)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def fallback_reply(self) -> str:
        """User-safe reply returned when the completion call fails."""
        return (
            "申し訳ありません。ただいま回答の生成が不安定になっています。\n"
            f"お急ぎの場合はお電話（{self.contact_phone}）、"
            f"または無料相談フォーム（{self.contact_form_url}）からお問い合わせください。"
        )


settings = Settings()
