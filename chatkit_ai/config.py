from typing import Dict, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Security: Read from .env, never hardcode keys here.
    # Empty key = provider is not registered (a warning is logged at bootstrap).
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"

    # Model Configuration
    DEFAULT_LLM_PROVIDER: Literal["openai"] = "openai"

    # Alias -> model id. Agents pick an alias ("fast", "smart") in their config.
    OPENAI_MODELS: Dict[str, str] = {
        "fast": "gpt-4o-mini",
        "smart": "gpt-4o",
        "legacy": "gpt-3.5-turbo",
    }
    OPENAI_DEFAULT_MODEL: str = "fast"
    OPENAI_EXTRACTION_MODEL: str = "gpt-4o-mini"

    # Outbound call bounds (seconds). No retries at the provider layer.
    PROVIDER_TIMEOUT: float = 30.0
    MODERATION_TIMEOUT: float = 10.0

    # Workflow execution
    WORKFLOW_MAX_ITERATIONS: int = 100
    DEFAULT_WORKFLOW: str = "newcomer-assistant"

    # Conversation persistence. No DATABASE_URL = in-process store.
    STATE_TTL_SECONDS: int = 3600
    DATABASE_URL: Optional[str] = None

    BLOCKED_MESSAGE: str = (
        "I'm sorry, but I cannot process this request as it may violate our content policy. "
        "Please rephrase your question or contact support if you believe this is an error."
    )

    LOG_LEVEL: str = "INFO"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def resolve_model(self, alias_or_id: str) -> str:
        """Maps a model alias to its id; unknown values are treated as raw ids."""
        return self.OPENAI_MODELS.get(alias_or_id, alias_or_id)


# Singleton instance
settings = Settings()
