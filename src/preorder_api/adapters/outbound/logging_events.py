from __future__ import annotations

import logging
from dataclasses import dataclass

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.errors import OrderCoreError, TransientFailure
from preorder_api.core.ports.outbound.events import EventPublisher, LifecycleEvent

logger = logging.getLogger(__name__)


@dataclass
class LoggingEventPublisher(EventPublisher):
    fail: bool = False

    def publish(self, event: LifecycleEvent) -> Result[None, OrderCoreError]:
        if self.fail:
            return Failure(TransientFailure(message="publisher is down"))
        logger.info(
            "[event] %s: order=%s order_status=%s payment_status=%s",
            event.kind.value,
            event.order_id.value,
            event.order_status,
            event.payment_status,
        )
        return Success(None)
