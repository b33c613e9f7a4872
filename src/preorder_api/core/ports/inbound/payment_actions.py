from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import OrderCoreError


@dataclass(frozen=True)
class AssignBankCommand:
    order_id: str
    bank_id: str
    actor: str = "customer"


@dataclass(frozen=True)
class SubmitProofCommand:
    payment_id: str
    file_ref: str
    content_type: str
    size_bytes: int
    actor: str = "customer"


@dataclass(frozen=True)
class RetryPaymentCommand:
    payment_id: str
    actor: str = "customer"


class PaymentActionsUseCase(Protocol):
    def assign_bank(
        self, command: AssignBankCommand
    ) -> Result[OrderAggregate, OrderCoreError]: ...

    def submit_proof(
        self, command: SubmitProofCommand
    ) -> Result[OrderAggregate, OrderCoreError]: ...

    def retry_payment(
        self, command: RetryPaymentCommand
    ) -> Result[OrderAggregate, OrderCoreError]: ...
