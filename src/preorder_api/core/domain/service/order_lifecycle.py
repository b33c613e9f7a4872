"""Order fulfilment state machine.

    PENDING -> CONFIRMED -> PROCESSING -> READY -> COMPLETED
       |
       +-> CANCELLED

PENDING -> CONFIRMED only happens as a consequence of a verified payment, and
the post-payment states fall back to CANCELLED only through a refund; both are
driven by the payment coordinator, never called directly by a client.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Mapping

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.errors import (
    CancellationNotAllowed,
    InvalidTransition,
    OrderClosed,
    OrderCoreError,
)
from preorder_api.core.domain.model.order import Order, OrderStatus, PickupStatus
from preorder_api.core.domain.model.payment import PaymentStatus

TRANSITIONS: Mapping[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# target -> required predecessor, for the explicit admin steps
ADMIN_STEPS: Mapping[OrderStatus, OrderStatus] = {
    OrderStatus.PROCESSING: OrderStatus.CONFIRMED,
    OrderStatus.READY: OrderStatus.PROCESSING,
    OrderStatus.COMPLETED: OrderStatus.READY,
}

REFUNDABLE = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.READY}
)


def ensure_open(order: Order) -> Result[Order, OrderCoreError]:
    if order.order_status.is_terminal:
        return Failure(
            OrderClosed(message=f"order is {order.order_status.value.lower()}")
        )
    return Success(order)


def _transition(
    order: Order, target: OrderStatus, at: datetime
) -> Result[Order, OrderCoreError]:
    if target not in TRANSITIONS[order.order_status]:
        return Failure(
            InvalidTransition(
                message="transition not defined",
                current=order.order_status.value,
                target=target.value,
            )
        )
    return Success(order.with_status(target, at))


def advance(
    order: Order, target: OrderStatus, at: datetime
) -> Result[Order, OrderCoreError]:
    """Explicit admin step; only CONFIRMED->PROCESSING->READY->COMPLETED."""
    closed = ensure_open(order)
    if isinstance(closed, Failure):
        return closed

    expected = ADMIN_STEPS.get(target)
    if expected is None:
        return Failure(
            InvalidTransition(
                message=f"{target.value} cannot be set directly",
                current=order.order_status.value,
                target=target.value,
            )
        )
    if order.order_status != expected:
        return Failure(
            InvalidTransition(
                message=f"{target.value} requires {expected.value}",
                current=order.order_status.value,
                target=target.value,
            )
        )

    moved = _transition(order, target, at)
    if target == OrderStatus.COMPLETED:
        return moved.map(lambda o: _with_pickup(o, PickupStatus.PICKED_UP))
    return moved


def confirm(order: Order, at: datetime) -> Result[Order, OrderCoreError]:
    """PENDING -> CONFIRMED, triggered by a payment verified as PAID."""
    closed = ensure_open(order)
    if isinstance(closed, Failure):
        return closed
    if order.order_status != OrderStatus.PENDING:
        return Failure(
            InvalidTransition(
                message="only pending orders can be confirmed",
                current=order.order_status.value,
                target=OrderStatus.CONFIRMED.value,
            )
        )
    return _transition(order, OrderStatus.CONFIRMED, at)


def cancel(
    order: Order, payment_status: PaymentStatus, at: datetime
) -> Result[Order, OrderCoreError]:
    """Customer cancellation: only when both the order and its payment are PENDING."""
    closed = ensure_open(order)
    if isinstance(closed, Failure):
        return closed
    if (
        order.order_status != OrderStatus.PENDING
        or payment_status != PaymentStatus.PENDING
    ):
        return Failure(
            CancellationNotAllowed(
                message="order and payment must both be pending",
                order_status=order.order_status.value,
                payment_status=payment_status.value,
            )
        )
    return _transition(order, OrderStatus.CANCELLED, at)


def close_for_refund(order: Order, at: datetime) -> Result[Order, OrderCoreError]:
    closed = ensure_open(order)
    if isinstance(closed, Failure):
        return closed
    if order.order_status not in REFUNDABLE:
        return Failure(
            InvalidTransition(
                message="only confirmed, unfinished orders can be refunded",
                current=order.order_status.value,
                target=OrderStatus.CANCELLED.value,
            )
        )
    return _transition(order, OrderStatus.CANCELLED, at)


def _with_pickup(order: Order, status: PickupStatus) -> Order:
    return replace(order, pickup_status=status)
