from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import (
    OrderCoreError,
    TransientFailure,
    ValidationError,
)
from preorder_api.core.domain.model.order import OrderId
from preorder_api.core.domain.model.payment import PaymentId
from preorder_api.core.ports.outbound.events import (
    EventKind,
    EventPublisher,
    LifecycleEvent,
)

logger = logging.getLogger(__name__)


def parse_order_id(raw: str) -> Result[OrderId, OrderCoreError]:
    try:
        return Success(OrderId(UUID(raw)))
    except (TypeError, ValueError):
        return Failure(ValidationError(message="order_id must be a valid UUID"))


def parse_payment_id(raw: str) -> Result[PaymentId, OrderCoreError]:
    try:
        return Success(PaymentId(UUID(raw)))
    except (TypeError, ValueError):
        return Failure(ValidationError(message="payment_id must be a valid UUID"))


def report(
    operation: str,
    result: Result[OrderAggregate, OrderCoreError],
    events: EventPublisher,
    kind: EventKind,
    at: datetime,
) -> Result[OrderAggregate, OrderCoreError]:
    """Log the outcome of a lifecycle operation and publish its event on success.

    The change is already committed when this runs, so a publisher failure is
    logged and does not turn the result into a failure.
    """
    if isinstance(result, Failure):
        err = result.failure()
        if isinstance(err, TransientFailure):
            logger.warning("%s failed transiently: %s", operation, err)
        else:
            logger.info("%s rejected: %s %s", operation, type(err).__name__, err)
        return result

    agg = result.unwrap()
    logger.info(
        "%s ok: order=%s order_status=%s payment_status=%s",
        operation,
        agg.order.order_number.value,
        agg.order_status.value,
        agg.payment_status.value,
    )
    published = events.publish(
        LifecycleEvent(
            kind=kind,
            order_id=agg.order.order_id,
            occurred_at=at,
            order_status=agg.order_status.value,
            payment_status=agg.payment_status.value,
        )
    )
    if isinstance(published, Failure):
        logger.warning(
            "event %s for order %s was not published: %s",
            kind.value,
            agg.order.order_id,
            published.failure(),
        )
    return result
