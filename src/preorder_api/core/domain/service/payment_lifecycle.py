"""Payment state machine.

    PENDING -> PAID -> REFUNDED
       |  ^
       v  | (retry / late PAID)
      FAILED

Proof submission and bank assignment do not move the status; they are only
accepted while the payment is PENDING.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.errors import (
    AlreadyFinalized,
    BankNotAssigned,
    InvalidBank,
    InvalidProof,
    InvalidTransition,
    OrderCoreError,
    PaymentClosed,
    ValidationError,
)
from preorder_api.core.domain.model.payment import Payment, PaymentStatus
from preorder_api.core.domain.model.proof import ProofArtifact, ProofPolicy

TRANSITIONS: Mapping[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PAID, PaymentStatus.PENDING}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}

VERIFY_OUTCOMES = frozenset({PaymentStatus.PAID, PaymentStatus.FAILED})


def _transition(
    payment: Payment, target: PaymentStatus, at: datetime
) -> Result[Payment, OrderCoreError]:
    if target not in TRANSITIONS[payment.status]:
        return Failure(
            InvalidTransition(
                message="payment transition not defined",
                current=payment.status.value,
                target=target.value,
            )
        )
    return Success(payment.with_status(target, at))


def ensure_pending(payment: Payment) -> Result[Payment, OrderCoreError]:
    if payment.status != PaymentStatus.PENDING:
        return Failure(
            PaymentClosed(message=f"payment is {payment.status.value.lower()}")
        )
    return Success(payment)


def validate_proof(
    artifact: ProofArtifact, policy: ProofPolicy
) -> Result[ProofArtifact, OrderCoreError]:
    if not artifact.file_ref.strip():
        return Failure(InvalidProof(message="file_ref is required"))
    content_type = artifact.content_type.strip().lower()
    if content_type not in policy.allowed_types:
        return Failure(
            InvalidProof(message=f"content type not allowed: {artifact.content_type}")
        )
    if artifact.size_bytes <= 0:
        return Failure(InvalidProof(message="file is empty"))
    if artifact.size_bytes > policy.max_bytes:
        return Failure(
            InvalidProof(
                message=f"file too large: {artifact.size_bytes} bytes"
            )
        )
    return Success(artifact)


def assign_bank(
    payment: Payment, bank_id: str, bank: Bank | None, at: datetime
) -> Result[Payment, OrderCoreError]:
    pending = ensure_pending(payment)
    if isinstance(pending, Failure):
        return pending
    if bank is None:
        return Failure(InvalidBank(message="unknown bank", bank_id=bank_id))
    if not bank.is_active:
        return Failure(InvalidBank(message="bank is inactive", bank_id=bank_id))
    return Success(payment.with_bank(bank.bank_id, at))


def submit_proof(
    payment: Payment, artifact: ProofArtifact, policy: ProofPolicy, at: datetime
) -> Result[Payment, OrderCoreError]:
    pending = ensure_pending(payment)
    if isinstance(pending, Failure):
        return pending
    if payment.bank_id is None:
        return Failure(BankNotAssigned(message="no destination bank assigned"))
    return validate_proof(artifact, policy).map(
        lambda a: payment.with_proof(a.file_ref, at)
    )


def verify(
    payment: Payment, outcome: PaymentStatus, at: datetime
) -> Result[Payment, OrderCoreError]:
    if payment.status.is_final:
        return Failure(
            AlreadyFinalized(
                message="payment already finalized",
                payment_status=payment.status.value,
            )
        )
    if outcome not in VERIFY_OUTCOMES:
        return Failure(
            ValidationError(message="verification outcome must be PAID or FAILED")
        )
    return _transition(payment, outcome, at)


def retry(payment: Payment, at: datetime) -> Result[Payment, OrderCoreError]:
    """FAILED -> PENDING, dropping the rejected proof but keeping the bank."""
    if payment.status.is_final:
        return Failure(
            PaymentClosed(message=f"payment is {payment.status.value.lower()}")
        )
    if payment.status != PaymentStatus.FAILED:
        return Failure(
            InvalidTransition(
                message="only failed payments can be retried",
                current=payment.status.value,
                target=PaymentStatus.PENDING.value,
            )
        )
    return _transition(payment, PaymentStatus.PENDING, at).map(
        lambda p: p.with_proof(None, at)
    )


def refund(payment: Payment, at: datetime) -> Result[Payment, OrderCoreError]:
    if payment.status == PaymentStatus.REFUNDED:
        return Failure(
            AlreadyFinalized(
                message="payment already refunded",
                payment_status=payment.status.value,
            )
        )
    return _transition(payment, PaymentStatus.REFUNDED, at)
