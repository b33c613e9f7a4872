from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import OrderCoreError


@dataclass(frozen=True)
class VerifyPaymentCommand:
    payment_id: str
    outcome: str  # PAID | FAILED
    actor: str = "admin"
    note: str | None = None


@dataclass(frozen=True)
class RefundPaymentCommand:
    payment_id: str
    actor: str = "admin"
    reason: str | None = None


class VerificationUseCase(Protocol):
    """Entry points for the external verification actor (admin or automation)."""

    def verify_payment(
        self, command: VerifyPaymentCommand
    ) -> Result[OrderAggregate, OrderCoreError]: ...

    def refund_payment(
        self, command: RefundPaymentCommand
    ) -> Result[OrderAggregate, OrderCoreError]: ...
