from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import OrderCoreError, ValidationError
from preorder_api.core.domain.model.order import Clock, OrderId, now_utc
from preorder_api.core.domain.model.payment import PaymentStatus
from preorder_api.core.domain.service import coordinator
from preorder_api.core.domain.service.lifecycle_support import (
    parse_payment_id,
    report,
)
from preorder_api.core.domain.service.payment_lifecycle import VERIFY_OUTCOMES
from preorder_api.core.ports.inbound.verify_payment import (
    RefundPaymentCommand,
    VerificationUseCase,
    VerifyPaymentCommand,
)
from preorder_api.core.ports.outbound.events import EventKind, EventPublisher
from preorder_api.core.ports.outbound.orders import OrderRepository


@dataclass(frozen=True)
class VerificationDeps:
    orders: OrderRepository
    events: EventPublisher
    clock: Clock = now_utc


@dataclass(frozen=True)
class VerificationService(VerificationUseCase):
    """
    The only way a payment becomes PAID or FAILED. This core never decides the
    outcome itself (no OCR or amount matching); a human or an external system
    calls in with it.
    """

    deps: VerificationDeps

    def verify_payment(
        self, command: VerifyPaymentCommand
    ) -> Result[OrderAggregate, OrderCoreError]:
        at = self.deps.clock()

        def apply(
            outcome: PaymentStatus, order_id: OrderId
        ) -> Result[OrderAggregate, OrderCoreError]:
            return self.deps.orders.update(
                order_id,
                lambda agg: coordinator.verify(
                    agg, outcome, at, command.actor, note=command.note
                ),
            )

        result = _parse_outcome(command.outcome).bind(
            lambda outcome: parse_payment_id(command.payment_id)
            .bind(self.deps.orders.find_order_id)
            .bind(lambda order_id: apply(outcome, order_id))
        )
        kind = (
            EventKind.PAYMENT_FAILED
            if command.outcome.strip().upper() == PaymentStatus.FAILED.value
            else EventKind.PAYMENT_VERIFIED
        )
        return report("verify_payment", result, self.deps.events, kind, at)

    def refund_payment(
        self, command: RefundPaymentCommand
    ) -> Result[OrderAggregate, OrderCoreError]:
        at = self.deps.clock()

        def apply(order_id: OrderId) -> Result[OrderAggregate, OrderCoreError]:
            return self.deps.orders.update(
                order_id,
                lambda agg: coordinator.refund(
                    agg, at, command.actor, note=command.reason
                ),
            )

        result = (
            parse_payment_id(command.payment_id)
            .bind(self.deps.orders.find_order_id)
            .bind(apply)
        )
        return report(
            "refund_payment", result, self.deps.events, EventKind.PAYMENT_REFUNDED, at
        )


def _parse_outcome(raw: str) -> Result[PaymentStatus, OrderCoreError]:
    try:
        outcome = PaymentStatus(raw.strip().upper())
    except ValueError:
        outcome = None
    if outcome not in VERIFY_OUTCOMES:
        return Failure(
            ValidationError(message="verification outcome must be PAID or FAILED")
        )
    return Success(outcome)
