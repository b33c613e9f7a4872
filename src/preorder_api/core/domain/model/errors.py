from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class OrderCoreError(Exception):
    message: str

    # Stable text for end users; `message` carries the technical detail.
    user_message: ClassVar[str] = "The request could not be completed."

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationError(OrderCoreError):
    user_message: ClassVar[str] = "The request contains invalid data."


@dataclass(frozen=True)
class NotFound(OrderCoreError):
    user_message: ClassVar[str] = "The requested record does not exist."


@dataclass(frozen=True)
class OrderNotFound(NotFound):
    order_id: str = ""

    user_message: ClassVar[str] = "This order could not be found."

    def __str__(self) -> str:
        return f"order_not_found: {self.order_id} ({self.message})"


@dataclass(frozen=True)
class PaymentNotFound(NotFound):
    payment_id: str = ""

    user_message: ClassVar[str] = "This payment could not be found."

    def __str__(self) -> str:
        return f"payment_not_found: {self.payment_id} ({self.message})"


@dataclass(frozen=True)
class InvalidTransition(OrderCoreError):
    current: str = ""
    target: str = ""

    user_message: ClassVar[str] = "This status change is not allowed right now."

    def __str__(self) -> str:
        return f"invalid_transition: {self.current} -> {self.target} ({self.message})"


@dataclass(frozen=True)
class CancellationNotAllowed(OrderCoreError):
    order_status: str = ""
    payment_status: str = ""

    user_message: ClassVar[str] = "This order can no longer be cancelled."

    def __str__(self) -> str:
        return (
            f"cancellation_not_allowed: order={self.order_status} "
            f"payment={self.payment_status} ({self.message})"
        )


@dataclass(frozen=True)
class PaymentClosed(OrderCoreError):
    user_message: ClassVar[str] = "This payment can no longer be changed."


@dataclass(frozen=True)
class OrderClosed(PaymentClosed):
    user_message: ClassVar[str] = "This order is closed and can no longer be changed."


@dataclass(frozen=True)
class InvalidBank(OrderCoreError):
    bank_id: str = ""

    user_message: ClassVar[str] = "This bank is not available."

    def __str__(self) -> str:
        return f"invalid_bank: {self.bank_id} ({self.message})"


@dataclass(frozen=True)
class BankNotAssigned(OrderCoreError):
    user_message: ClassVar[str] = (
        "Please choose a destination bank before uploading a payment proof."
    )


@dataclass(frozen=True)
class InvalidProof(OrderCoreError):
    user_message: ClassVar[str] = (
        "The payment proof must be an image or PDF within the size limit."
    )


@dataclass(frozen=True)
class AlreadyFinalized(OrderCoreError):
    payment_status: str = ""

    user_message: ClassVar[str] = "This payment has already been finalized."

    def __str__(self) -> str:
        return f"already_finalized: {self.payment_status} ({self.message})"


@dataclass(frozen=True)
class InvariantViolation(OrderCoreError):
    user_message: ClassVar[str] = "The order could not be updated consistently."


@dataclass(frozen=True)
class TransientFailure(OrderCoreError):
    user_message: ClassVar[str] = (
        "The service is temporarily unavailable. Please try again."
    )
