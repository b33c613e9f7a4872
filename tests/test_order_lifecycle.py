from __future__ import annotations

import pytest
from returns.result import Failure, Success

from conftest import T0
from preorder_api.core.domain.model.errors import (
    CancellationNotAllowed,
    InvalidTransition,
    OrderClosed,
)
from preorder_api.core.domain.model.order import OrderStatus, PickupStatus
from preorder_api.core.domain.model.payment import PaymentStatus
from preorder_api.core.domain.service import order_lifecycle


def test_admin_steps_walk_forward_to_completed(make_aggregate):
    order = make_aggregate(OrderStatus.CONFIRMED, PaymentStatus.PAID).order

    for target in (OrderStatus.PROCESSING, OrderStatus.READY, OrderStatus.COMPLETED):
        result = order_lifecycle.advance(order, target, T0)
        assert isinstance(result, Success)
        order = result.unwrap()
        assert order.order_status == target

    assert order.pickup_status == PickupStatus.PICKED_UP


def test_skipping_a_step_is_invalid_transition(make_aggregate):
    order = make_aggregate(OrderStatus.CONFIRMED, PaymentStatus.PAID).order

    result = order_lifecycle.advance(order, OrderStatus.READY, T0)

    assert isinstance(result, Failure)
    err = result.failure()
    assert isinstance(err, InvalidTransition)
    assert (err.current, err.target) == ("CONFIRMED", "READY")


@pytest.mark.parametrize("target", [OrderStatus.CONFIRMED, OrderStatus.CANCELLED])
def test_confirm_and_cancel_are_not_admin_targets(make_aggregate, target):
    order = make_aggregate().order

    result = order_lifecycle.advance(order, target, T0)

    assert isinstance(result.failure(), InvalidTransition)


@pytest.mark.parametrize("status", [OrderStatus.CANCELLED, OrderStatus.COMPLETED])
def test_terminal_orders_reject_every_change(make_aggregate, status):
    payment = (
        PaymentStatus.PAID if status == OrderStatus.COMPLETED else PaymentStatus.PENDING
    )
    order = make_aggregate(status, payment).order

    assert isinstance(
        order_lifecycle.advance(order, OrderStatus.PROCESSING, T0).failure(),
        OrderClosed,
    )
    assert isinstance(order_lifecycle.confirm(order, T0).failure(), OrderClosed)
    assert isinstance(
        order_lifecycle.cancel(order, PaymentStatus.PENDING, T0).failure(), OrderClosed
    )


def test_confirm_only_from_pending(make_aggregate):
    pending = make_aggregate().order
    confirmed = order_lifecycle.confirm(pending, T0).unwrap()
    assert confirmed.order_status == OrderStatus.CONFIRMED

    again = order_lifecycle.confirm(confirmed, T0)
    assert isinstance(again.failure(), InvalidTransition)


def test_cancel_requires_pending_payment(make_aggregate):
    order = make_aggregate().order

    ok = order_lifecycle.cancel(order, PaymentStatus.PENDING, T0)
    assert ok.unwrap().order_status == OrderStatus.CANCELLED

    refused = order_lifecycle.cancel(order, PaymentStatus.FAILED, T0)
    assert isinstance(refused.failure(), CancellationNotAllowed)


def test_close_for_refund_accepts_unfinished_paid_states(make_aggregate):
    for status in (OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.READY):
        order = make_aggregate(status, PaymentStatus.PAID).order
        closed = order_lifecycle.close_for_refund(order, T0).unwrap()
        assert closed.order_status == OrderStatus.CANCELLED

    pending = make_aggregate().order
    assert isinstance(
        order_lifecycle.close_for_refund(pending, T0).failure(), InvalidTransition
    )


def test_transition_table_has_no_exit_from_terminal_states():
    assert order_lifecycle.TRANSITIONS[OrderStatus.CANCELLED] == frozenset()
    assert order_lifecycle.TRANSITIONS[OrderStatus.COMPLETED] == frozenset()
