"""Configuration management for reasoning-gateway providers.

Settings are read from environment variables (and ``.env``) by
pydantic-settings. Each configured provider is turned into an immutable
:class:`ProviderConfig` only when the registry first needs it, so the
credential is read once per provider and never earlier.

Provider sources:
    - Built-in ``solara`` preset (DeepSeek R1), enabled by SOLARA_API_KEY
    - Any number of extra providers from PROVIDERS (JSON) or nested
      variables such as PROVIDERS__OPENAI__API_KEY
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings

SOLARA_PROVIDER_ID = "solara"


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable per-provider call settings.

    The credential is excluded from ``repr`` so it never reaches logs.
    """

    provider_id: str
    credential: str = field(repr=False)
    model: str
    base_url: str
    dialect: str = "openai_chat"

    # Time budget and retry settings (milliseconds)
    timeout_ms: int = 20000
    max_retries: int = 3
    base_backoff_ms: int = 1000
    max_backoff_ms: int = 30000
    backoff_jitter: float = 0.0

    # Rough cost estimate emitted with usage telemetry
    cost_per_1k_tokens: float = 0.01

    def __post_init__(self):
        """Validate configuration."""
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        if not self.provider_id:
            raise ValueError("provider_id must not be empty")
        if not self.credential:
            raise ValueError(f"credential for provider '{self.provider_id}' must not be empty")
        if not self.model:
            raise ValueError(f"model for provider '{self.provider_id}' must not be empty")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be > 0, got {self.timeout_ms}")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.base_backoff_ms <= 0:
            raise ValueError(f"base_backoff_ms must be > 0, got {self.base_backoff_ms}")
        if self.max_backoff_ms < self.base_backoff_ms:
            raise ValueError(
                f"max_backoff_ms ({self.max_backoff_ms}) must be >= "
                f"base_backoff_ms ({self.base_backoff_ms})"
            )
        if not 0.0 <= self.backoff_jitter <= 1.0:
            raise ValueError(f"backoff_jitter must be within [0, 1], got {self.backoff_jitter}")
        if self.cost_per_1k_tokens < 0:
            raise ValueError(f"cost_per_1k_tokens must be >= 0, got {self.cost_per_1k_tokens}")


class ProviderSettings(BaseModel):
    """Raw settings for one additional provider."""

    api_key: SecretStr
    model: str
    base_url: str
    dialect: str = "openai_chat"
    timeout_ms: int = 20000
    max_retries: int = 3
    base_backoff_ms: int = 1000
    max_backoff_ms: int | None = None  # None = global MAX_BACKOFF_MS
    backoff_jitter: float = 0.0
    cost_per_1k_tokens: float = 0.01


class Settings(BaseSettings):
    """Application settings."""

    # ===== Solara (DeepSeek R1) preset =====
    solara_api_key: SecretStr | None = None
    solara_model: str = "deepseek-r1"
    solara_base_url: str = "https://api.deepseek.com/v1"
    solara_dialect: str = "openai_chat"
    solara_timeout_ms: int = 20000
    solara_max_retries: int = 3
    solara_base_backoff_ms: int = 1000
    solara_cost_per_1k_tokens: float = 0.01  # ~$0.01 per 1K tokens

    # ===== Additional providers =====
    providers: dict[str, ProviderSettings] = Field(
        default_factory=dict,
        description="Extra providers keyed by provider id"
    )

    # ===== Retry ceiling =====
    max_backoff_ms: int = 30000  # Cap on a single backoff sleep

    # ===== Application Settings =====
    log_level: str = "info"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
        env_nested_delimiter = "__"

    def configured_providers(self) -> list[str]:
        """Get ids of every provider with a configuration"""
        ids = []
        if self.solara_api_key is not None and self.solara_api_key.get_secret_value():
            ids.append(SOLARA_PROVIDER_ID)
        ids.extend(pid for pid in self.providers if pid not in ids)
        return ids

    def provider_config(self, provider_id: str) -> ProviderConfig:
        """Build the ProviderConfig for a provider id.

        This is the only place credentials are read out of SecretStr.

        Raises:
            KeyError: If the provider id is not configured
            ValueError: If the configured values are invalid
        """
        if provider_id == SOLARA_PROVIDER_ID and SOLARA_PROVIDER_ID in self.configured_providers():
            return ProviderConfig(
                provider_id=SOLARA_PROVIDER_ID,
                credential=self.solara_api_key.get_secret_value(),
                model=self.solara_model,
                base_url=self.solara_base_url,
                dialect=self.solara_dialect,
                timeout_ms=self.solara_timeout_ms,
                max_retries=self.solara_max_retries,
                base_backoff_ms=self.solara_base_backoff_ms,
                max_backoff_ms=max(self.max_backoff_ms, self.solara_base_backoff_ms),
                cost_per_1k_tokens=self.solara_cost_per_1k_tokens,
            )

        if provider_id not in self.providers:
            raise KeyError(provider_id)

        raw = self.providers[provider_id]
        max_backoff_ms = raw.max_backoff_ms
        if max_backoff_ms is None:
            max_backoff_ms = max(self.max_backoff_ms, raw.base_backoff_ms)
        return ProviderConfig(
            provider_id=provider_id,
            credential=raw.api_key.get_secret_value(),
            model=raw.model,
            base_url=raw.base_url,
            dialect=raw.dialect,
            timeout_ms=raw.timeout_ms,
            max_retries=raw.max_retries,
            base_backoff_ms=raw.base_backoff_ms,
            max_backoff_ms=max_backoff_ms,
            backoff_jitter=raw.backoff_jitter,
            cost_per_1k_tokens=raw.cost_per_1k_tokens,
        )


# Global settings instance
settings = Settings()
