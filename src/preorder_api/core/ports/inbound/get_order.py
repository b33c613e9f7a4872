from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from preorder_api.core.domain.model.aggregate import OrderAggregate, StatusChange
from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.domain.service.eligibility import Eligibility
from preorder_api.core.domain.service.fee_apportionment import FeeApportionment


@dataclass(frozen=True)
class GetOrderQuery:
    order_id: str  # UUID string


@dataclass(frozen=True)
class OrderAggregateView:
    """What a polling client receives: one snapshot plus facts derived from it."""

    aggregate: OrderAggregate
    eligibility: Eligibility
    fees: FeeApportionment


class GetOrderUseCase(Protocol):
    def get_order(
        self, query: GetOrderQuery
    ) -> Result[OrderAggregateView, OrderCoreError]: ...

    def get_history(
        self, query: GetOrderQuery
    ) -> Result[Sequence[StatusChange], OrderCoreError]: ...

    def get_fees(
        self, query: GetOrderQuery
    ) -> Result[FeeApportionment, OrderCoreError]: ...

    def describe(self, aggregate: OrderAggregate) -> OrderAggregateView: ...
