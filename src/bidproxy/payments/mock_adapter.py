"""
In-memory payment gateway for development and tests.

Never talks to a processor; keeps intents and refunds in dictionaries and
records every call so tests can assert on them.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any

from bidproxy.payments.interface import PaymentGateway, PaymentIntent, Refund
from bidproxy.shared.exceptions import PaymentGatewayError


@dataclass
class MockPaymentGateway(PaymentGateway):
    """Deterministic gateway: ids are sequential, secrets derive from ids."""

    intents: dict[str, PaymentIntent] = field(default_factory=dict)
    refunds: dict[str, Refund] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    fail_with: str | None = None
    _seq: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def _check_failure(self) -> None:
        if self.fail_with:
            raise PaymentGatewayError(self.fail_with)

    async def create_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        self.calls.append(
            ("create_intent", {"amount": amount, "currency": currency, "metadata": metadata})
        )
        self._check_failure()

        intent_id = f"pi_mock_{next(self._seq):06d}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_mock",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        return intent

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        self.calls.append(("retrieve_intent", {"intent_id": intent_id}))
        self._check_failure()

        try:
            return self.intents[intent_id]
        except KeyError:
            raise PaymentGatewayError(f"No such payment_intent: {intent_id}") from None

    async def create_refund(
        self,
        intent_id: str,
        amount: int | None = None,
    ) -> Refund:
        self.calls.append(("create_refund", {"intent_id": intent_id, "amount": amount}))
        self._check_failure()

        intent = self.intents.get(intent_id)
        if intent is None:
            raise PaymentGatewayError(f"No such payment_intent: {intent_id}")

        refund_id = f"re_mock_{next(self._seq):06d}"
        refund = Refund(
            id=refund_id,
            payment_intent_id=intent_id,
            amount=intent.amount if amount is None else amount,
            status="succeeded",
        )
        self.refunds[refund_id] = refund
        return refund

    def calls_named(self, name: str) -> list[dict[str, Any]]:
        return [params for call, params in self.calls if call == name]
