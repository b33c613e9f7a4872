from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import BANKS, T0
from preorder_api.core.domain.model.order import OrderStatus
from preorder_api.core.domain.model.payment import PaymentStatus
from preorder_api.core.domain.service import eligibility
from preorder_api.core.domain.service.eligibility import DeadlineUrgency

WINDOW = timedelta(hours=24)


def test_fresh_order_has_full_window_and_polls(make_aggregate):
    agg = make_aggregate()

    view = eligibility.evaluate(agg, T0 + timedelta(hours=1), WINDOW, 30)

    assert view.can_cancel
    assert view.can_assign_bank
    assert not view.can_upload_proof
    assert view.payment_deadline == T0 + WINDOW
    assert view.time_remaining == timedelta(hours=23)
    assert not view.is_overdue
    assert view.deadline_urgency == DeadlineUrgency.NORMAL
    assert view.should_poll
    assert view.poll_interval_seconds == 30
    assert view.status_message == "Waiting for payment to process the order."


def test_overdue_is_reported_not_acted_on(make_aggregate):
    agg = make_aggregate()

    view = eligibility.evaluate(agg, T0 + WINDOW + timedelta(seconds=1), WINDOW, 30)

    assert view.is_overdue
    assert view.time_remaining == timedelta(0)
    assert view.can_cancel


def test_deadline_boundary_is_not_overdue(make_aggregate):
    assert not eligibility.is_overdue(make_aggregate(), T0 + WINDOW, WINDOW)


def test_submitted_proof_stops_the_countdown(make_aggregate):
    agg = make_aggregate(bank=BANKS[0], proof_url="proofs/a.jpg")

    view = eligibility.evaluate(agg, T0 + timedelta(days=3), WINDOW, 30)

    assert view.can_upload_proof
    assert view.payment_deadline is None
    assert view.time_remaining is None
    assert not view.is_overdue
    assert view.status_message == "Payment proof received. Waiting for verification."


@pytest.mark.parametrize(
    "order_status, payment_status, expected",
    [
        (OrderStatus.CONFIRMED, PaymentStatus.PAID, False),
        (OrderStatus.COMPLETED, PaymentStatus.PAID, False),
        (OrderStatus.CANCELLED, PaymentStatus.PENDING, False),
        (OrderStatus.PENDING, PaymentStatus.FAILED, True),
    ],
)
def test_polling_stops_once_nothing_external_can_move_the_order(
    make_aggregate, order_status, payment_status, expected
):
    agg = make_aggregate(order_status, payment_status)

    view = eligibility.evaluate(agg, T0, WINDOW, 30)

    assert view.should_poll is expected
    assert view.poll_interval_seconds == (30 if expected else None)


def test_failed_payment_offers_retry_only(make_aggregate):
    agg = make_aggregate(payment_status=PaymentStatus.FAILED)

    view = eligibility.evaluate(agg, T0, WINDOW, 30)

    assert view.can_retry
    assert not view.can_cancel
    assert not view.can_assign_bank
    assert view.status_message == "Payment failed. Please try again."


@pytest.mark.parametrize(
    "order_status, expected",
    [
        (OrderStatus.CONFIRMED, True),
        (OrderStatus.READY, True),
        (OrderStatus.COMPLETED, False),
    ],
)
def test_refund_offered_for_unfinished_paid_orders(make_aggregate, order_status, expected):
    agg = make_aggregate(order_status, PaymentStatus.PAID)

    assert eligibility.can_refund(agg) is expected


def test_refunded_order_message(make_aggregate):
    agg = make_aggregate(OrderStatus.CANCELLED, PaymentStatus.REFUNDED)

    assert eligibility.status_message(agg) == (
        "Order cancelled. The payment has been refunded."
    )


@pytest.mark.parametrize(
    "order_status, payment_status",
    [
        (OrderStatus.CANCELLED, PaymentStatus.PENDING),
        (OrderStatus.PENDING, PaymentStatus.FAILED),
        (OrderStatus.CONFIRMED, PaymentStatus.PAID),
    ],
)
def test_no_countdown_once_the_order_has_moved_on(
    make_aggregate, order_status, payment_status
):
    agg = make_aggregate(order_status, payment_status)

    view = eligibility.evaluate(agg, T0 + timedelta(hours=30), WINDOW, 30)

    assert view.payment_deadline is None
    assert view.time_remaining is None
    assert view.deadline_urgency is None
    assert not view.is_overdue


@pytest.mark.parametrize(
    "elapsed, expected",
    [
        (timedelta(hours=22), DeadlineUrgency.NORMAL),
        (timedelta(hours=23), DeadlineUrgency.WARNING),
        (timedelta(hours=23, minutes=30), DeadlineUrgency.DANGER),
        (timedelta(hours=23, minutes=59), DeadlineUrgency.DANGER),
        (WINDOW, DeadlineUrgency.EXPIRED),
        (timedelta(hours=30), DeadlineUrgency.EXPIRED),
    ],
)
def test_deadline_urgency_tiers(make_aggregate, elapsed, expected):
    assert eligibility.deadline_urgency(make_aggregate(), T0 + elapsed, WINDOW) == expected
