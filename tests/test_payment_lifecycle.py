from __future__ import annotations

from datetime import timedelta

import pytest
from returns.result import Failure, Success

from conftest import BANKS, T0
from preorder_api.core.domain.model.errors import (
    AlreadyFinalized,
    BankNotAssigned,
    InvalidBank,
    InvalidProof,
    InvalidTransition,
    PaymentClosed,
)
from preorder_api.core.domain.model.payment import PaymentStatus
from preorder_api.core.domain.model.proof import ProofArtifact, ProofPolicy
from preorder_api.core.domain.service import payment_lifecycle

ACTIVE, _, INACTIVE = BANKS
LATER = T0 + timedelta(minutes=5)


def jpeg(size: int = 1024) -> ProofArtifact:
    return ProofArtifact("proofs/a.jpg", "image/jpeg", size)


def test_assign_bank_sets_bank_on_pending_payment(make_aggregate):
    payment = make_aggregate().payment

    result = payment_lifecycle.assign_bank(payment, ACTIVE.bank_id, ACTIVE, LATER)

    assigned = result.unwrap()
    assert assigned.bank_id == ACTIVE.bank_id
    assert assigned.updated_at == LATER
    assert assigned.status == PaymentStatus.PENDING


def test_assign_bank_rejects_unknown_and_inactive(make_aggregate):
    payment = make_aggregate().payment

    unknown = payment_lifecycle.assign_bank(payment, "nope", None, T0)
    inactive = payment_lifecycle.assign_bank(payment, INACTIVE.bank_id, INACTIVE, T0)

    assert isinstance(unknown.failure(), InvalidBank)
    assert isinstance(inactive.failure(), InvalidBank)
    assert inactive.failure().bank_id == INACTIVE.bank_id


@pytest.mark.parametrize(
    "status", [PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.REFUNDED]
)
def test_assign_bank_only_while_pending(make_aggregate, status):
    payment = make_aggregate(payment_status=status).payment

    result = payment_lifecycle.assign_bank(payment, ACTIVE.bank_id, ACTIVE, T0)

    assert isinstance(result.failure(), PaymentClosed)


def test_submit_proof_needs_bank(make_aggregate):
    payment = make_aggregate().payment

    result = payment_lifecycle.submit_proof(payment, jpeg(), ProofPolicy(), T0)

    assert isinstance(result.failure(), BankNotAssigned)


def test_submit_proof_records_reference(make_aggregate):
    payment = make_aggregate(bank=ACTIVE).payment

    result = payment_lifecycle.submit_proof(payment, jpeg(), ProofPolicy(), LATER)

    updated = result.unwrap()
    assert updated.proof_url == "proofs/a.jpg"
    assert updated.status == PaymentStatus.PENDING


@pytest.mark.parametrize(
    "artifact",
    [
        ProofArtifact("proofs/a.gif", "image/gif", 100),
        ProofArtifact("proofs/a.jpg", "image/jpeg", 0),
        ProofArtifact("proofs/a.jpg", "image/jpeg", 5 * 1024 * 1024 + 1),
        ProofArtifact("  ", "image/jpeg", 100),
    ],
)
def test_submit_proof_rejects_bad_artifacts(make_aggregate, artifact):
    payment = make_aggregate(bank=ACTIVE).payment

    result = payment_lifecycle.submit_proof(payment, artifact, ProofPolicy(), T0)

    assert isinstance(result.failure(), InvalidProof)


def test_content_type_check_ignores_case():
    artifact = ProofArtifact("proofs/a.pdf", "Application/PDF", 10)

    assert isinstance(payment_lifecycle.validate_proof(artifact, ProofPolicy()), Success)


def test_proof_at_exact_size_limit_is_accepted():
    artifact = ProofArtifact("proofs/a.png", "image/png", 5 * 1024 * 1024)

    assert isinstance(payment_lifecycle.validate_proof(artifact, ProofPolicy()), Success)


def test_verify_twice_is_already_finalized(make_aggregate):
    payment = make_aggregate().payment

    paid = payment_lifecycle.verify(payment, PaymentStatus.PAID, T0).unwrap()
    again = payment_lifecycle.verify(paid, PaymentStatus.PAID, T0)

    assert paid.status == PaymentStatus.PAID
    assert isinstance(again.failure(), AlreadyFinalized)


def test_failed_payment_can_still_be_verified_paid(make_aggregate):
    payment = make_aggregate().payment
    failed = payment_lifecycle.verify(payment, PaymentStatus.FAILED, T0).unwrap()

    late = payment_lifecycle.verify(failed, PaymentStatus.PAID, LATER)
    repeat = payment_lifecycle.verify(failed, PaymentStatus.FAILED, LATER)

    assert late.unwrap().status == PaymentStatus.PAID
    assert isinstance(repeat.failure(), InvalidTransition)


def test_retry_clears_proof_and_keeps_bank(make_aggregate):
    payment = make_aggregate(bank=ACTIVE, proof_url="proofs/a.jpg").payment
    failed = payment.with_status(PaymentStatus.FAILED, T0)

    retried = payment_lifecycle.retry(failed, LATER).unwrap()

    assert retried.status == PaymentStatus.PENDING
    assert retried.proof_url is None
    assert retried.bank_id == ACTIVE.bank_id


def test_retry_on_pending_is_invalid(make_aggregate):
    result = payment_lifecycle.retry(make_aggregate().payment, T0)

    assert isinstance(result, Failure)
    assert isinstance(result.failure(), InvalidTransition)


def test_refund_only_from_paid(make_aggregate):
    payment = make_aggregate().payment
    paid = payment.with_status(PaymentStatus.PAID, T0)

    refunded = payment_lifecycle.refund(paid, LATER).unwrap()

    assert refunded.status == PaymentStatus.REFUNDED
    twice = payment_lifecycle.refund(refunded, LATER)
    unpaid = payment_lifecycle.refund(payment, LATER)
    assert isinstance(twice.failure(), AlreadyFinalized)
    assert isinstance(unpaid.failure(), InvalidTransition)
