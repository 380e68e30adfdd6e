"""
Payment gateway interface definition.

Amounts crossing this interface are integers in minor currency units
(cents). Conversion from major units happens in PaymentService.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from bidproxy.shared.exceptions import PaymentGatewayError


@dataclass(frozen=True)
class PaymentIntent:
    """Gateway-side charge referenced by id."""

    id: str
    client_secret: str | None
    amount: int
    currency: str
    status: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Refund:
    """Refund issued against a payment intent."""

    id: str
    payment_intent_id: str
    amount: int
    status: str


class PaymentGateway(ABC):
    """Abstract interface for payment processors.

    Implementations are stateless and do not retry beyond what the
    processor's own client does. Failures surface as PaymentGatewayError.
    """

    @abstractmethod
    async def create_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        """Create a payment intent for `amount` minor units."""
        ...

    @abstractmethod
    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        """Fetch an existing payment intent."""
        ...

    @abstractmethod
    async def create_refund(
        self,
        intent_id: str,
        amount: int | None = None,
    ) -> Refund:
        """Refund a payment intent; `amount=None` refunds the full charge."""
        ...


__all__ = ["PaymentGateway", "PaymentGatewayError", "PaymentIntent", "Refund"]
