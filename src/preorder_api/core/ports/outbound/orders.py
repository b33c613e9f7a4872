from __future__ import annotations

from typing import Callable, Protocol

from returns.result import Result

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.domain.model.order import OrderId
from preorder_api.core.domain.model.payment import PaymentId

Mutation = Callable[[OrderAggregate], Result[OrderAggregate, OrderCoreError]]


class OrderRepository(Protocol):
    """
    Order + Payment + Bank are stored and locked together. A real database
    implementation runs `update` as one transaction holding a row lock on the
    order (SELECT ... FOR UPDATE) and re-reads inside it.
    """

    def add(self, aggregate: OrderAggregate) -> Result[OrderId, OrderCoreError]: ...

    def get(self, order_id: OrderId) -> Result[OrderAggregate, OrderCoreError]: ...

    def find_order_id(
        self, payment_id: PaymentId
    ) -> Result[OrderId, OrderCoreError]: ...

    def update(
        self, order_id: OrderId, mutate: Mutation
    ) -> Result[OrderAggregate, OrderCoreError]:
        """Apply `mutate` to the latest snapshot; commit only on Success."""
        ...
