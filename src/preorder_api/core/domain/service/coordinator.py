"""Aggregate-level operations.

This is the one place where the order and payment state machines meet. Each
function takes a snapshot and returns either the complete next snapshot or a
typed error, so a repository can apply it as a single atomic write.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.aggregate import (
    ChangeKind,
    OrderAggregate,
    StatusChange,
)
from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.errors import InvalidTransition, OrderCoreError
from preorder_api.core.domain.model.order import OrderStatus
from preorder_api.core.domain.model.payment import PaymentStatus
from preorder_api.core.domain.model.proof import ProofArtifact, ProofPolicy
from preorder_api.core.domain.service import order_lifecycle, payment_lifecycle


def _payment_ops_allowed(agg: OrderAggregate) -> Result[OrderAggregate, OrderCoreError]:
    return order_lifecycle.ensure_open(agg.order).map(lambda _: agg)


def assign_bank(
    agg: OrderAggregate,
    bank_id: str,
    bank: Bank | None,
    at: datetime,
    actor: str,
) -> Result[OrderAggregate, OrderCoreError]:
    def apply(current: OrderAggregate) -> Result[OrderAggregate, OrderCoreError]:
        return payment_lifecycle.assign_bank(current.payment, bank_id, bank, at).map(
            lambda payment: replace(
                current,
                payment=payment,
                order=current.order.with_bank(payment.bank_id or bank_id, at),
                bank=bank,
            ).record(
                StatusChange(
                    at=at,
                    kind=ChangeKind.BANK,
                    from_value=current.order.bank_id,
                    to_value=bank_id,
                    actor=actor,
                )
            )
        )

    return _payment_ops_allowed(agg).bind(apply)


def submit_proof(
    agg: OrderAggregate,
    artifact: ProofArtifact,
    policy: ProofPolicy,
    at: datetime,
    actor: str,
) -> Result[OrderAggregate, OrderCoreError]:
    def apply(current: OrderAggregate) -> Result[OrderAggregate, OrderCoreError]:
        submitted = payment_lifecycle.submit_proof(
            current.payment, artifact, policy, at
        )
        return submitted.map(
            lambda payment: replace(current, payment=payment).record(
                StatusChange(
                    at=at,
                    kind=ChangeKind.PROOF,
                    from_value=current.payment.proof_url,
                    to_value=payment.proof_url,
                    actor=actor,
                )
            )
        )

    return _payment_ops_allowed(agg).bind(apply)


def verify(
    agg: OrderAggregate,
    outcome: PaymentStatus,
    at: datetime,
    actor: str,
    note: str | None = None,
) -> Result[OrderAggregate, OrderCoreError]:
    """Record the verification outcome; PAID confirms the order in the same step.

    No bank is required here: the verifier may accept a transfer it matched by
    other means.
    """
    # a refunded payment reports AlreadyFinalized rather than OrderClosed
    if agg.order_status == OrderStatus.CANCELLED and not agg.payment_status.is_final:
        return _payment_ops_allowed(agg)

    verified = payment_lifecycle.verify(agg.payment, outcome, at)
    if isinstance(verified, Failure):
        return verified
    payment = verified.unwrap()

    order = agg.order
    if outcome == PaymentStatus.PAID:
        confirmed = order_lifecycle.confirm(order, at)
        if isinstance(confirmed, Failure):
            return confirmed
        order = confirmed.unwrap()

    changes = [
        StatusChange(
            at=at,
            kind=ChangeKind.PAYMENT,
            from_value=agg.payment_status.value,
            to_value=payment.status.value,
            actor=actor,
            note=note,
        )
    ]
    if order.order_status != agg.order_status:
        changes.append(
            StatusChange(
                at=at,
                kind=ChangeKind.ORDER,
                from_value=agg.order_status.value,
                to_value=order.order_status.value,
                actor=actor,
            )
        )
    return Success(replace(agg, order=order, payment=payment).record(*changes))


def retry(
    agg: OrderAggregate, at: datetime, actor: str
) -> Result[OrderAggregate, OrderCoreError]:
    def apply(current: OrderAggregate) -> Result[OrderAggregate, OrderCoreError]:
        if (
            current.payment_status == PaymentStatus.FAILED
            and current.order_status != OrderStatus.PENDING
        ):
            return Failure(
                InvalidTransition(
                    message="payment can only be retried while the order is pending",
                    current=current.order_status.value,
                    target=PaymentStatus.PENDING.value,
                )
            )
        return payment_lifecycle.retry(current.payment, at).map(
            lambda payment: replace(current, payment=payment).record(
                StatusChange(
                    at=at,
                    kind=ChangeKind.PAYMENT,
                    from_value=current.payment_status.value,
                    to_value=payment.status.value,
                    actor=actor,
                    note="retry",
                )
            )
        )

    return _payment_ops_allowed(agg).bind(apply)


def cancel(
    agg: OrderAggregate, at: datetime, actor: str
) -> Result[OrderAggregate, OrderCoreError]:
    """Cancel the order; the payment record is left as it is (PENDING)."""
    return order_lifecycle.cancel(agg.order, agg.payment_status, at).map(
        lambda order: replace(agg, order=order).record(
            StatusChange(
                at=at,
                kind=ChangeKind.ORDER,
                from_value=agg.order_status.value,
                to_value=order.order_status.value,
                actor=actor,
            )
        )
    )


def advance(
    agg: OrderAggregate, target: OrderStatus, at: datetime, actor: str
) -> Result[OrderAggregate, OrderCoreError]:
    return order_lifecycle.advance(agg.order, target, at).map(
        lambda order: replace(agg, order=order).record(
            StatusChange(
                at=at,
                kind=ChangeKind.ORDER,
                from_value=agg.order_status.value,
                to_value=order.order_status.value,
                actor=actor,
            )
        )
    )


def refund(
    agg: OrderAggregate, at: datetime, actor: str, note: str | None = None
) -> Result[OrderAggregate, OrderCoreError]:
    """PAID -> REFUNDED together with order -> CANCELLED."""
    refunded = payment_lifecycle.refund(agg.payment, at)
    if isinstance(refunded, Failure):
        return refunded
    closed = order_lifecycle.close_for_refund(agg.order, at)
    if isinstance(closed, Failure):
        return closed

    payment = refunded.unwrap()
    order = closed.unwrap()
    return Success(
        replace(agg, order=order, payment=payment).record(
            StatusChange(
                at=at,
                kind=ChangeKind.PAYMENT,
                from_value=agg.payment_status.value,
                to_value=payment.status.value,
                actor=actor,
                note=note,
            ),
            StatusChange(
                at=at,
                kind=ChangeKind.ORDER,
                from_value=agg.order_status.value,
                to_value=order.order_status.value,
                actor=actor,
            ),
        )
    )

