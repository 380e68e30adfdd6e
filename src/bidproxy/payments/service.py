"""
Payment policy wrapper around the gateway.

Converts major currency units to the gateway's minor units and keeps
metadata and logging uniform for every caller.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from bidproxy.payments.config import PaymentConfig, get_payment_config
from bidproxy.payments.interface import PaymentGateway, PaymentIntent, Refund
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)

_MINOR_PER_MAJOR = Decimal(100)


def to_minor_units(amount: Decimal | int | str) -> int:
    """Convert a major-unit amount to whole cents, rounding half up."""
    cents = (Decimal(amount) * _MINOR_PER_MAJOR).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(cents)


class PaymentService:
    """Creates, retrieves and refunds payment intents."""

    def __init__(
        self,
        gateway: PaymentGateway,
        config: PaymentConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._config = config or get_payment_config()

    @property
    def currency(self) -> str:
        return self._config.currency

    async def create_intent(
        self,
        amount: Decimal,
        metadata: dict[str, object],
    ) -> PaymentIntent:
        """Create an intent for `amount` major units.

        Metadata values are stringified; processors only accept strings.
        """
        minor = to_minor_units(amount)
        intent = await self._gateway.create_intent(
            amount=minor,
            currency=self.currency,
            metadata={key: str(value) for key, value in metadata.items()},
        )
        logger.info(
            "Payment intent created",
            extra={
                "payment_intent_id": intent.id,
                "amount_minor": minor,
                "currency": self.currency,
            },
        )
        return intent

    async def get_intent(self, intent_id: str) -> PaymentIntent:
        return await self._gateway.retrieve_intent(intent_id)

    async def refund(self, intent_id: str, amount: Decimal | None = None) -> Refund:
        """Refund an intent; with no amount the whole charge is returned."""
        minor = None if amount is None else to_minor_units(amount)
        refund = await self._gateway.create_refund(intent_id, amount=minor)
        logger.info(
            "Refund issued",
            extra={
                "refund_id": refund.id,
                "payment_intent_id": intent_id,
                "amount_minor": refund.amount,
                "full_refund": minor is None,
            },
        )
        return refund
