from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Result

from preorder_api.core.domain.model.aggregate import OrderAggregate, StatusChange
from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.domain.model.order import Clock, now_utc
from preorder_api.core.domain.model.policy import LifecyclePolicy
from preorder_api.core.domain.service import eligibility
from preorder_api.core.domain.service.fee_apportionment import (
    FeeApportionment,
    apportion_service_fee,
)
from preorder_api.core.domain.service.lifecycle_support import parse_order_id
from preorder_api.core.ports.inbound.get_order import (
    GetOrderQuery,
    GetOrderUseCase,
    OrderAggregateView,
)
from preorder_api.core.ports.outbound.orders import OrderRepository


@dataclass(frozen=True)
class GetOrderDeps:
    orders: OrderRepository
    policy: LifecyclePolicy = LifecyclePolicy()
    clock: Clock = now_utc


@dataclass(frozen=True)
class GetOrderService(GetOrderUseCase):
    deps: GetOrderDeps

    def get_order(
        self, query: GetOrderQuery
    ) -> Result[OrderAggregateView, OrderCoreError]:
        return self._load(query).map(self.describe)

    def get_history(
        self, query: GetOrderQuery
    ) -> Result[Sequence[StatusChange], OrderCoreError]:
        return self._load(query).map(lambda agg: tuple(reversed(agg.history)))

    def get_fees(
        self, query: GetOrderQuery
    ) -> Result[FeeApportionment, OrderCoreError]:
        return self._load(query).map(
            lambda agg: apportion_service_fee(agg.order.items, agg.order.service_fee)
        )

    def describe(self, aggregate: OrderAggregate) -> OrderAggregateView:
        policy = self.deps.policy
        return OrderAggregateView(
            aggregate=aggregate,
            eligibility=eligibility.evaluate(
                aggregate,
                now=self.deps.clock(),
                window=policy.payment_window,
                poll_interval_seconds=policy.poll_interval_seconds,
            ),
            fees=apportion_service_fee(
                aggregate.order.items, aggregate.order.service_fee
            ),
        )

    def _load(self, query: GetOrderQuery) -> Result[OrderAggregate, OrderCoreError]:
        return parse_order_id(query.order_id).bind(self.deps.orders.get)
