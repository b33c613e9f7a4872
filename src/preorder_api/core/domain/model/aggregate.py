from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Tuple

from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.order import Order, OrderStatus
from preorder_api.core.domain.model.payment import Payment, PaymentStatus

# Order states that can only be reached after the payment was verified as PAID.
PAID_ORDER_STATES = frozenset(
    {
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.READY,
        OrderStatus.COMPLETED,
    }
)


class ChangeKind(str, Enum):
    ORDER = "ORDER"
    PAYMENT = "PAYMENT"
    BANK = "BANK"
    PROOF = "PROOF"


@dataclass(frozen=True)
class StatusChange:
    at: datetime
    kind: ChangeKind
    from_value: str | None
    to_value: str | None
    actor: str
    note: str | None = None


@dataclass(frozen=True)
class OrderAggregate:
    """Order + Payment + assigned Bank, always read and written as one unit."""

    order: Order
    payment: Payment
    bank: Bank | None = None
    history: Tuple[StatusChange, ...] = ()

    @property
    def order_status(self) -> OrderStatus:
        return self.order.order_status

    @property
    def payment_status(self) -> PaymentStatus:
        return self.payment.status

    def record(self, *changes: StatusChange) -> "OrderAggregate":
        return replace(self, history=self.history + changes)

    def invariant_violations(self) -> Tuple[str, ...]:
        problems: list[str] = []
        if not self.order.totals_are_consistent():
            problems.append("order totals do not add up")

        paid = self.payment.status == PaymentStatus.PAID
        if paid != (self.order.order_status in PAID_ORDER_STATES):
            problems.append(
                f"order {self.order.order_status.value} disagrees with "
                f"payment {self.payment.status.value}"
            )
        if (
            self.payment.status == PaymentStatus.REFUNDED
            and self.order.order_status != OrderStatus.CANCELLED
        ):
            problems.append("refunded payment on a non-cancelled order")

        if self.payment.bank_id != self.order.bank_id:
            problems.append("payment bank does not mirror order bank")
        if self.bank is not None and self.bank.bank_id != self.order.bank_id:
            problems.append("attached bank does not match order bank")
        return tuple(problems)

    def is_consistent(self) -> bool:
        return not self.invariant_violations()
