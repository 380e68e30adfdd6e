"""
Stripe payment gateway adapter.

The stripe SDK is synchronous; calls run in a worker thread so the event
loop keeps serving other requests while Stripe answers.
"""

from __future__ import annotations

import functools
import logging
from types import ModuleType
from typing import Any, Callable

import anyio
import stripe

from bidproxy.payments.config import PaymentConfig, get_payment_config
from bidproxy.payments.interface import PaymentGateway, PaymentIntent, Refund
from bidproxy.shared.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)


class StripePaymentGateway(PaymentGateway):
    """Payment intents and refunds through Stripe."""

    def __init__(
        self,
        config: PaymentConfig | None = None,
        stripe_client: ModuleType | Any = stripe,
    ) -> None:
        self._config = config or get_payment_config()
        self._stripe = stripe_client

        if not self._config.stripe_secret_key:
            logger.warning("Stripe secret key not set; payment calls will fail")

    def _request_options(self) -> dict[str, str]:
        if not self._config.stripe_secret_key:
            raise PaymentGatewayError("Stripe not configured")
        return {
            "api_key": self._config.stripe_secret_key,
            "stripe_version": self._config.stripe_api_version,
        }

    async def _call(self, operation: str, fn: Callable[..., Any], **params: Any) -> Any:
        options = self._request_options()
        try:
            return await anyio.to_thread.run_sync(functools.partial(fn, **params, **options))
        except self._stripe.StripeError as e:
            logger.error(
                "Stripe call failed",
                extra={
                    "operation": operation,
                    "error_type": type(e).__name__,
                    "stripe_code": getattr(e, "code", None),
                    "error": str(e),
                },
            )
            raise PaymentGatewayError(
                f"Stripe {operation} failed: {e}",
                provider_code=getattr(e, "code", None),
            ) from e

    async def create_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        intent = await self._call(
            "create_intent",
            self._stripe.PaymentIntent.create,
            amount=amount,
            currency=currency,
            metadata=metadata,
            automatic_payment_methods={"enabled": True},
        )
        logger.info(
            "Stripe payment intent created",
            extra={"payment_intent_id": intent.id, "amount": amount, "currency": currency},
        )
        return _to_intent(intent)

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        intent = await self._call(
            "retrieve_intent",
            self._stripe.PaymentIntent.retrieve,
            id=intent_id,
        )
        return _to_intent(intent)

    async def create_refund(
        self,
        intent_id: str,
        amount: int | None = None,
    ) -> Refund:
        params: dict[str, Any] = {"payment_intent": intent_id}
        if amount is not None:
            params["amount"] = amount

        refund = await self._call("create_refund", self._stripe.Refund.create, **params)
        logger.info(
            "Stripe refund created",
            extra={"refund_id": refund.id, "payment_intent_id": intent_id, "amount": amount},
        )
        return Refund(
            id=refund.id,
            payment_intent_id=intent_id,
            amount=int(refund.amount),
            status=str(refund.status),
        )


def _to_intent(intent: Any) -> PaymentIntent:
    metadata = getattr(intent, "metadata", None) or {}
    return PaymentIntent(
        id=intent.id,
        client_secret=intent.client_secret,
        amount=int(intent.amount),
        currency=str(intent.currency),
        status=str(intent.status),
        metadata={str(k): str(v) for k, v in dict(metadata).items()},
    )
