"""
Payment gateway factory.

Single source of truth for configuration: PaymentConfig (pydantic
settings), never raw os.getenv("STRIPE_*").
"""

from __future__ import annotations

import logging
from functools import lru_cache

from bidproxy.payments.config import PaymentConfig, ProviderType, get_payment_config
from bidproxy.payments.interface import PaymentGateway
from bidproxy.payments.mock_adapter import MockPaymentGateway
from bidproxy.payments.stripe_adapter import StripePaymentGateway

logger = logging.getLogger(__name__)


def _mask(s: str, keep: int = 7) -> str:
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return f"{s[:keep]}***"


def build_payment_gateway(cfg: PaymentConfig) -> PaymentGateway:
    logger.info(
        "Payment config resolved",
        extra={
            "provider_type": cfg.provider_type.value,
            "stripe_secret_key": _mask(cfg.stripe_secret_key),
            "currency": cfg.currency,
        },
    )

    if cfg.provider_type == ProviderType.STRIPE:
        return StripePaymentGateway(cfg)

    if cfg.provider_type == ProviderType.MOCK:
        return MockPaymentGateway()

    raise ValueError(f"Unsupported payment provider_type: {cfg.provider_type}")


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    """Create and cache the payment gateway for this process."""
    return build_payment_gateway(get_payment_config())
