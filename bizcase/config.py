# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# Values are loaded in this priority order (highest first):
#   1. Environment variables (e.g., `OPENAI_API_KEY=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# USAGE:
#   from bizcase.config import settings
#   print(settings.discount_rate)
# =============================================================================

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every setting has a default suitable for local development except the
    provider API keys, which must come from the environment.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "Business Case Report Generator"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Origins allowed to call the API from a browser (the form front-end).
    cors_origins: list[str] = ["*"]

    # -------------------------------------------------------------------------
    # API Keys — External Services
    # -------------------------------------------------------------------------
    # No defaults: a provider without a key fails when first requested,
    # with an error naming the variable to set.
    # -------------------------------------------------------------------------
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    deepseek_api_key: str = ""

    # -------------------------------------------------------------------------
    # LLM Configuration — Multi-Provider
    # -------------------------------------------------------------------------
    # The form offers a provider key per request:
    #   gpt4     → OpenAI chat completions, openai_model
    #   deepseek → OpenAI-compatible API at deepseek_base_url, deepseek_model
    #   claude   → Anthropic messages API, anthropic_model
    # -------------------------------------------------------------------------
    default_llm_provider: str = "gpt4"
    openai_model: str = "gpt-4"
    deepseek_base_url: str = "https://api.deepseek.com"
    deepseek_model: str = "deepseek-chat"
    anthropic_model: str = "claude-sonnet-4-6"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4096

    # -------------------------------------------------------------------------
    # Financial Model
    # -------------------------------------------------------------------------
    # discount_rate: rate used for NPV.
    # opex_growth_rate: yearly OPEX inflation applied to the year-1 figure.
    # default_timeline_years: projection horizon when the input omits one.
    # -------------------------------------------------------------------------
    discount_rate: float = 0.10
    opex_growth_rate: float = 0.10
    default_timeline_years: int = 5

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------
    # Base name of downloaded files; the extension is added per format.
    export_filename: str = "business-case-report"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    In tests, override it with FastAPI's dependency_overrides:
        app.dependency_overrides[get_settings] = lambda: Settings(debug=True)
    """
    return Settings()


# ---------------------------------------------------------------------------
# Module-level convenience instance
# ---------------------------------------------------------------------------
settings = get_settings()
