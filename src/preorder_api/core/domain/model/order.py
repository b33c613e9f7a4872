from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Iterable, Tuple
from uuid import UUID, uuid4

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class OrderId:
    value: UUID

    @staticmethod
    def new() -> "OrderId":
        return OrderId(uuid4())

    @staticmethod
    def parse(raw: str) -> "OrderId":
        return OrderId(UUID(raw))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OrderNumber:
    value: str

    @staticmethod
    def generate(at: datetime) -> "OrderNumber":
        millis = str(int(at.timestamp() * 1000))
        alphabet = string.ascii_uppercase + string.digits
        suffix = "".join(secrets.choice(alphabet) for _ in range(6))
        return OrderNumber(f"ORD-{millis[-8:]}-{suffix}")


@dataclass(frozen=True)
class CustomerId:
    value: str


@dataclass(frozen=True)
class StoreRef:
    store_id: str
    name: str


@dataclass(frozen=True, order=True)
class Money:
    amount: int
    currency: str = "IDR"

    @staticmethod
    def of(amount: Decimal | int | str, currency: str = "IDR") -> "Money":
        dec = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return Money(int(dec), currency)

    @staticmethod
    def zero(currency: str = "IDR") -> "Money":
        return Money(0, currency)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, n: int) -> "Money":
        return Money(self.amount * n, self.currency)

    def split(self, parts: int) -> Tuple["Money", ...]:
        """Even integer split; the remainder is added to the first part."""
        if parts <= 0:
            raise ValueError("parts must be > 0")
        share, remainder = divmod(self.amount, parts)
        first = Money(share + remainder, self.currency)
        return (first,) + tuple(Money(share, self.currency) for _ in range(parts - 1))

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.CANCELLED, OrderStatus.COMPLETED)


class PickupStatus(str, Enum):
    NOT_PICKED_UP = "NOT_PICKED_UP"
    PICKED_UP = "PICKED_UP"


@dataclass(frozen=True)
class OrderItem:
    bundle_id: str
    bundle_name: str
    store: StoreRef
    quantity: int
    unit_price: Money
    total_price: Money

    @staticmethod
    def of(
        bundle_id: str,
        bundle_name: str,
        store: StoreRef,
        quantity: int,
        unit_price: Money,
    ) -> "OrderItem":
        return OrderItem(
            bundle_id=bundle_id,
            bundle_name=bundle_name,
            store=store,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
        )


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    order_number: OrderNumber
    customer_id: CustomerId
    items: Tuple[OrderItem, ...]
    subtotal_amount: Money
    service_fee: Money
    total_amount: Money
    order_status: OrderStatus
    created_at: datetime
    updated_at: datetime
    pickup_date: date | None = None
    pickup_status: PickupStatus = PickupStatus.NOT_PICKED_UP
    notes: str | None = None
    bank_id: str | None = None

    def with_status(self, status: OrderStatus, at: datetime) -> "Order":
        return replace(self, order_status=status, updated_at=at)

    def with_bank(self, bank_id: str, at: datetime) -> "Order":
        return replace(self, bank_id=bank_id, updated_at=at)

    def totals_are_consistent(self) -> bool:
        if any(it.total_price != it.unit_price * it.quantity for it in self.items):
            return False
        currency = self.subtotal_amount.currency
        if self.subtotal_amount != fold_money(
            (it.total_price for it in self.items), currency=currency
        ):
            return False
        return self.total_amount == self.subtotal_amount + self.service_fee


def fold_money(values: Iterable[Money], currency: str = "IDR") -> Money:
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
