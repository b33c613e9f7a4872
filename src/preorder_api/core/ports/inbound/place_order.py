from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol, Sequence

from returns.result import Result

from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.domain.model.order import Money, OrderId, OrderNumber
from preorder_api.core.domain.model.payment import PaymentId


@dataclass(frozen=True)
class PlaceOrderLine:
    bundle_id: str
    bundle_name: str
    store_id: str
    store_name: str
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class PlaceOrderCommand:
    customer_id: str
    lines: Sequence[PlaceOrderLine]
    pickup_date: date | None = None
    notes: str | None = None
    bank_id: str | None = None


@dataclass(frozen=True)
class OrderReceipt:
    order_id: OrderId
    order_number: OrderNumber
    payment_id: PaymentId
    subtotal: Money
    service_fee: Money
    total: Money


class PlaceOrderUseCase(Protocol):
    def place_order(
        self, command: PlaceOrderCommand
    ) -> Result[OrderReceipt, OrderCoreError]: ...
