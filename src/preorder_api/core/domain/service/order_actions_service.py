from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import OrderCoreError, ValidationError
from preorder_api.core.domain.model.order import Clock, OrderId, OrderStatus, now_utc
from preorder_api.core.domain.service import coordinator
from preorder_api.core.domain.service.lifecycle_support import parse_order_id, report
from preorder_api.core.ports.inbound.order_actions import (
    AdvanceOrderCommand,
    CancelOrderCommand,
    OrderActionsUseCase,
)
from preorder_api.core.ports.outbound.events import EventKind, EventPublisher
from preorder_api.core.ports.outbound.orders import OrderRepository


@dataclass(frozen=True)
class OrderActionsDeps:
    orders: OrderRepository
    events: EventPublisher
    clock: Clock = now_utc


@dataclass(frozen=True)
class OrderActionsService(OrderActionsUseCase):
    deps: OrderActionsDeps

    def cancel_order(
        self, command: CancelOrderCommand
    ) -> Result[OrderAggregate, OrderCoreError]:
        at = self.deps.clock()

        def apply(order_id: OrderId) -> Result[OrderAggregate, OrderCoreError]:
            return self.deps.orders.update(
                order_id, lambda agg: coordinator.cancel(agg, at, command.actor)
            )

        result = parse_order_id(command.order_id).bind(apply)
        return report(
            "cancel_order", result, self.deps.events, EventKind.ORDER_CANCELLED, at
        )

    def advance_order(
        self, command: AdvanceOrderCommand
    ) -> Result[OrderAggregate, OrderCoreError]:
        at = self.deps.clock()

        def apply(
            target: OrderStatus, order_id: OrderId
        ) -> Result[OrderAggregate, OrderCoreError]:
            return self.deps.orders.update(
                order_id,
                lambda agg: coordinator.advance(agg, target, at, command.actor),
            )

        result = _parse_target(command.target).bind(
            lambda target: parse_order_id(command.order_id).bind(
                lambda order_id: apply(target, order_id)
            )
        )
        return report(
            "advance_order", result, self.deps.events, EventKind.ORDER_ADVANCED, at
        )


def _parse_target(raw: str) -> Result[OrderStatus, OrderCoreError]:
    try:
        return Success(OrderStatus(raw.strip().upper()))
    except ValueError:
        return Failure(ValidationError(message=f"unknown order status: {raw}"))
