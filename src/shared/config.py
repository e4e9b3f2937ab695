"""Storefront configuration.

Settings are read once from the environment (prefix ``STOREFRONT_``) or a
``.env`` file. Handlers look them up through ``get_settings()``; tests swap
them with ``set_settings()``. Database selection lives in ``domain.toml``.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.exceptions import ConfigurationError


class PaymentSettings(BaseModel):
    """The slice of configuration handed to the payment components."""

    model_config = {"frozen": True}

    gateway: Literal["fake", "stripe"] = "fake"
    key_id: str = ""
    key_secret: str = ""
    timeout_seconds: float = 10.0
    store_name: str = "Storefront"

    def require_secret(self) -> str:
        if not self.key_secret:
            raise ConfigurationError({"gateway_key_secret": ["Payment signing secret is not configured"]})
        return self.key_secret

    def require_credentials(self) -> tuple[str, str]:
        if not self.key_id or not self.key_secret:
            raise ConfigurationError(
                {"gateway_credentials": ["Payment gateway keys are not configured (key id and key secret)"]}
            )
        return self.key_id, self.key_secret


class StorefrontSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )

    environment: Literal["development", "test", "production"] = "development"
    store_name: str = "Storefront"

    # Payment gateway
    gateway: Literal["fake", "stripe"] = "fake"
    gateway_key_id: str = ""
    gateway_key_secret: str = ""
    gateway_timeout_seconds: float = Field(default=10.0, gt=0)

    # Order policy
    return_window_days: int = Field(default=3, ge=0)
    instant_settlement_methods: list[str] = ["upi"]
    distance_jitter: Literal["deterministic", "random"] = "deterministic"

    # Logging / HTTP
    log_level: str = "INFO"
    log_json: bool = False
    cors_origins: list[str] = ["*"]

    @field_validator("instant_settlement_methods", mode="before")
    @classmethod
    def parse_methods(cls, v):
        if isinstance(v, str):
            return [m.strip().lower() for m in v.split(",") if m.strip()]
        return [str(m).lower() for m in v]

    def payment_settings(self) -> PaymentSettings:
        return PaymentSettings(
            gateway=self.gateway,
            key_id=self.gateway_key_id,
            key_secret=self.gateway_key_secret,
            timeout_seconds=self.gateway_timeout_seconds,
            store_name=self.store_name,
        )


_current_settings: StorefrontSettings | None = None


def get_settings() -> StorefrontSettings:
    """Return the active settings, reading the environment on first use."""
    global _current_settings
    if _current_settings is None:
        _current_settings = StorefrontSettings()
    return _current_settings


def set_settings(settings: StorefrontSettings) -> None:
    """Replace the active settings (tests and the application factory)."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Forget the active settings so the next call re-reads the environment."""
    global _current_settings
    _current_settings = None
