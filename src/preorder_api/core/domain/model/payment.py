from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4


@dataclass(frozen=True)
class PaymentId:
    value: UUID

    @staticmethod
    def new() -> "PaymentId":
        return PaymentId(uuid4())

    @staticmethod
    def parse(raw: str) -> "PaymentId":
        return PaymentId(UUID(raw))

    def __str__(self) -> str:
        return str(self.value)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

    @property
    def is_final(self) -> bool:
        return self in (PaymentStatus.PAID, PaymentStatus.REFUNDED)


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "BANK_TRANSFER"


@dataclass(frozen=True)
class Payment:
    payment_id: PaymentId
    status: PaymentStatus
    method: PaymentMethod
    created_at: datetime
    updated_at: datetime
    proof_url: str | None = None
    bank_id: str | None = None

    @property
    def has_proof(self) -> bool:
        return bool(self.proof_url)

    def with_status(self, status: PaymentStatus, at: datetime) -> "Payment":
        return replace(self, status=status, updated_at=at)

    def with_bank(self, bank_id: str, at: datetime) -> "Payment":
        return replace(self, bank_id=bank_id, updated_at=at)

    def with_proof(self, proof_url: str | None, at: datetime) -> "Payment":
        return replace(self, proof_url=proof_url, updated_at=at)
