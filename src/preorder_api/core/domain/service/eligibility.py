"""Derived, read-only facts about an order snapshot.

Everything here is a pure function of the aggregate and an injected ``now``;
nothing reads the wall clock and nothing mutates state. Expiry is advisory:
an overdue payment is reported, never auto-cancelled.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.order import OrderStatus
from preorder_api.core.domain.model.payment import Payment, PaymentStatus


class DeadlineUrgency(str, Enum):
    NORMAL = "NORMAL"
    WARNING = "WARNING"  # an hour or less left
    DANGER = "DANGER"  # thirty minutes or less left
    EXPIRED = "EXPIRED"


WARNING_THRESHOLD = timedelta(hours=1)
DANGER_THRESHOLD = timedelta(minutes=30)


@dataclass(frozen=True)
class Eligibility:
    can_cancel: bool
    can_assign_bank: bool
    can_upload_proof: bool
    can_retry: bool
    can_refund: bool
    payment_deadline: datetime | None
    is_overdue: bool
    time_remaining: timedelta | None
    deadline_urgency: DeadlineUrgency | None
    should_poll: bool
    poll_interval_seconds: int | None
    status_message: str


def expiry_applies(agg: OrderAggregate) -> bool:
    """The payment window only runs while nothing has happened yet."""
    return (
        agg.order_status == OrderStatus.PENDING
        and agg.payment_status == PaymentStatus.PENDING
        and not agg.payment.has_proof
    )


def payment_deadline(payment: Payment, window: timedelta) -> datetime:
    return payment.created_at + window


def is_overdue(agg: OrderAggregate, now: datetime, window: timedelta) -> bool:
    if not expiry_applies(agg):
        return False
    return now > payment_deadline(agg.payment, window)


def time_remaining(
    agg: OrderAggregate, now: datetime, window: timedelta
) -> timedelta | None:
    if not expiry_applies(agg):
        return None
    remaining = payment_deadline(agg.payment, window) - now
    return max(remaining, timedelta(0))


def deadline_urgency(
    agg: OrderAggregate, now: datetime, window: timedelta
) -> DeadlineUrgency | None:
    remaining = time_remaining(agg, now, window)
    if remaining is None:
        return None
    if remaining <= timedelta(0):
        return DeadlineUrgency.EXPIRED
    if remaining <= DANGER_THRESHOLD:
        return DeadlineUrgency.DANGER
    if remaining <= WARNING_THRESHOLD:
        return DeadlineUrgency.WARNING
    return DeadlineUrgency.NORMAL


def can_cancel(agg: OrderAggregate) -> bool:
    return (
        agg.order_status == OrderStatus.PENDING
        and agg.payment_status == PaymentStatus.PENDING
    )


def can_assign_bank(agg: OrderAggregate) -> bool:
    return (
        agg.payment_status == PaymentStatus.PENDING
        and agg.order_status != OrderStatus.CANCELLED
    )


def can_upload_proof(agg: OrderAggregate) -> bool:
    return can_assign_bank(agg) and agg.order.bank_id is not None


def can_retry(agg: OrderAggregate) -> bool:
    return (
        agg.payment_status == PaymentStatus.FAILED
        and agg.order_status == OrderStatus.PENDING
    )


def can_refund(agg: OrderAggregate) -> bool:
    return agg.payment_status == PaymentStatus.PAID and not agg.order_status.is_terminal


def should_poll(agg: OrderAggregate) -> bool:
    """Whether a client should keep re-fetching this order.

    True while something outside the client (the verification actor) can still
    move the order: the order is pending, or a submitted proof awaits review.
    """
    if agg.order_status.is_terminal:
        return False
    if agg.order_status == OrderStatus.PENDING:
        return True
    return agg.payment_status == PaymentStatus.PENDING and agg.payment.has_proof


def status_message(agg: OrderAggregate) -> str:
    order_status = agg.order_status
    payment_status = agg.payment_status

    if order_status == OrderStatus.CANCELLED:
        if payment_status == PaymentStatus.REFUNDED:
            return "Order cancelled. The payment has been refunded."
        return "Order cancelled."
    if order_status == OrderStatus.PENDING:
        if payment_status == PaymentStatus.FAILED:
            return "Payment failed. Please try again."
        if agg.payment.has_proof:
            return "Payment proof received. Waiting for verification."
        return "Waiting for payment to process the order."
    if order_status == OrderStatus.CONFIRMED:
        return "Payment received. The order will be processed shortly."
    if order_status == OrderStatus.PROCESSING:
        return "The order is being processed."
    if order_status == OrderStatus.READY:
        return "The order is ready for pickup."
    return "Order completed."


def evaluate(
    agg: OrderAggregate,
    now: datetime,
    window: timedelta,
    poll_interval_seconds: int,
) -> Eligibility:
    poll = should_poll(agg)
    return Eligibility(
        can_cancel=can_cancel(agg),
        can_assign_bank=can_assign_bank(agg),
        can_upload_proof=can_upload_proof(agg),
        can_retry=can_retry(agg),
        can_refund=can_refund(agg),
        payment_deadline=(
            payment_deadline(agg.payment, window)
            if expiry_applies(agg)
            else None
        ),
        is_overdue=is_overdue(agg, now, window),
        time_remaining=time_remaining(agg, now, window),
        deadline_urgency=deadline_urgency(agg, now, window),
        should_poll=poll,
        poll_interval_seconds=poll_interval_seconds if poll else None,
        status_message=status_message(agg),
    )
