"""
Payment gateway integration: provider adapters and the policy wrapper.
"""

from bidproxy.payments.config import PaymentConfig, ProviderType, get_payment_config
from bidproxy.payments.factory import build_payment_gateway, get_payment_gateway
from bidproxy.payments.interface import (
    PaymentGateway,
    PaymentGatewayError,
    PaymentIntent,
    Refund,
)
from bidproxy.payments.mock_adapter import MockPaymentGateway
from bidproxy.payments.service import PaymentService, to_minor_units
from bidproxy.payments.stripe_adapter import StripePaymentGateway

__all__ = [
    "MockPaymentGateway",
    "PaymentConfig",
    "PaymentGateway",
    "PaymentGatewayError",
    "PaymentIntent",
    "PaymentService",
    "ProviderType",
    "Refund",
    "StripePaymentGateway",
    "build_payment_gateway",
    "get_payment_config",
    "get_payment_gateway",
    "to_minor_units",
]
