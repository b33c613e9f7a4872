from __future__ import annotations

from datetime import timedelta

from preorder_api.config import Settings
from preorder_api.core.domain.model.order import Money


def test_defaults_match_the_payment_policy():
    policy = Settings(_env_file=None).lifecycle_policy()

    assert policy.payment_window == timedelta(hours=24)
    assert policy.poll_interval_seconds == 30
    assert policy.service_fee_per_store == Money(25000, "IDR")
    assert policy.proof.max_bytes == 5 * 1024 * 1024
    assert "application/pdf" in policy.proof.allowed_types


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PREORDER_PAYMENT_WINDOW_HOURS", "48")
    monkeypatch.setenv("PREORDER_SERVICE_FEE_PER_STORE", "15000")
    monkeypatch.setenv("PREORDER_PROOF_ALLOWED_TYPES", "image/PNG, application/pdf")

    policy = Settings(_env_file=None).lifecycle_policy()

    assert policy.payment_window == timedelta(hours=48)
    assert policy.service_fee_per_store == Money(15000, "IDR")
    assert policy.proof.allowed_types == frozenset({"image/png", "application/pdf"})
