"""
Payment provider configuration.
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderType(str, Enum):
    """Supported payment provider types."""

    STRIPE = "stripe"
    MOCK = "mock"


class PaymentConfig(BaseSettings):
    """Payment provider configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider_type: ProviderType = Field(default=ProviderType.STRIPE)

    stripe_secret_key: str = Field(default="")
    stripe_api_version: str = Field(default="2024-11-20.acacia")

    # Single-currency service
    currency: str = Field(default="usd", min_length=3, max_length=3)

    @property
    def is_configured(self) -> bool:
        return self.provider_type is ProviderType.MOCK or bool(self.stripe_secret_key)


def get_payment_config() -> PaymentConfig:
    return PaymentConfig()
