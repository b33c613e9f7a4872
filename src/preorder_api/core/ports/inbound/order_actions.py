from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import OrderCoreError


@dataclass(frozen=True)
class CancelOrderCommand:
    order_id: str
    actor: str = "customer"


@dataclass(frozen=True)
class AdvanceOrderCommand:
    order_id: str
    target: str  # PROCESSING | READY | COMPLETED
    actor: str = "admin"


class OrderActionsUseCase(Protocol):
    def cancel_order(
        self, command: CancelOrderCommand
    ) -> Result[OrderAggregate, OrderCoreError]: ...

    def advance_order(
        self, command: AdvanceOrderCommand
    ) -> Result[OrderAggregate, OrderCoreError]: ...
