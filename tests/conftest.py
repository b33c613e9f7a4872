from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from preorder_api.asgi import app_from_usecases
from preorder_api.bootstrap import UseCases, build_usecases
from preorder_api.config import Settings
from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.order import (
    CustomerId,
    Money,
    Order,
    OrderId,
    OrderItem,
    OrderNumber,
    OrderStatus,
    StoreRef,
    fold_money,
)
from preorder_api.core.domain.model.payment import (
    Payment,
    PaymentId,
    PaymentMethod,
    PaymentStatus,
)
from preorder_api.core.ports.inbound.place_order import (
    OrderReceipt,
    PlaceOrderCommand,
    PlaceOrderLine,
)

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

BANKS = (
    Bank("b1", "Bank One", "B1", "111", "Store Holdings"),
    Bank("b2", "Bank Two", "B2", "222", "Store Holdings"),
    Bank("b-off", "Closed Bank", "BX", "999", "Store Holdings", is_active=False),
)


@dataclass
class FakeClock:
    now: datetime = T0

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def line(
    store_id: str = "store-a", price: int | Decimal = 50000, qty: int = 1
) -> PlaceOrderLine:
    return PlaceOrderLine(
        bundle_id=f"bundle-{store_id}",
        bundle_name=f"Bundle from {store_id}",
        store_id=store_id,
        store_name=store_id.replace("-", " ").title(),
        unit_price=Decimal(price),
        quantity=qty,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, lock_timeout_seconds=1.0)


@pytest.fixture
def usecases(settings: Settings, clock: FakeClock) -> UseCases:
    return build_usecases(settings, clock=clock, banks=BANKS)


@pytest.fixture
def place(usecases: UseCases) -> Callable[..., OrderReceipt]:
    def _place(*lines: PlaceOrderLine, bank_id: str | None = None) -> OrderReceipt:
        cmd = PlaceOrderCommand(
            customer_id="cust-1", lines=lines or (line(),), bank_id=bank_id
        )
        return usecases.place_order.place_order(cmd).unwrap()

    return _place


@pytest.fixture
def load(usecases: UseCases) -> Callable[[OrderReceipt], OrderAggregate]:
    def _load(receipt: OrderReceipt) -> OrderAggregate:
        return usecases.orders.get(receipt.order_id).unwrap()

    return _load


@pytest.fixture
def client(usecases: UseCases) -> TestClient:
    return TestClient(app_from_usecases(usecases))


def build_aggregate(
    order_status: OrderStatus = OrderStatus.PENDING,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
    *,
    bank: Bank | None = None,
    proof_url: str | None = None,
    items: tuple[OrderItem, ...] | None = None,
    created_at: datetime = T0,
) -> OrderAggregate:
    items = items or (
        OrderItem.of(
            "bundle-a", "Bundle A", StoreRef("store-a", "Store A"), 2, Money(40000)
        ),
    )
    subtotal = fold_money(it.total_price for it in items)
    fee = Money(25000) * len({it.store.store_id for it in items})
    bank_id = bank.bank_id if bank else None
    order = Order(
        order_id=OrderId.new(),
        order_number=OrderNumber.generate(created_at),
        customer_id=CustomerId("cust-1"),
        items=items,
        subtotal_amount=subtotal,
        service_fee=fee,
        total_amount=subtotal + fee,
        order_status=order_status,
        created_at=created_at,
        updated_at=created_at,
        bank_id=bank_id,
    )
    payment = Payment(
        payment_id=PaymentId.new(),
        status=payment_status,
        method=PaymentMethod.BANK_TRANSFER,
        created_at=created_at,
        updated_at=created_at,
        proof_url=proof_url,
        bank_id=bank_id,
    )
    return OrderAggregate(order=order, payment=payment, bank=bank)


@pytest.fixture
def make_aggregate() -> Callable[..., OrderAggregate]:
    return build_aggregate
