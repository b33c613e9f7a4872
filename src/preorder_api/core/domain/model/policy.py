from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from preorder_api.core.domain.model.order import Money
from preorder_api.core.domain.model.proof import ProofPolicy


@dataclass(frozen=True)
class LifecyclePolicy:
    payment_window: timedelta = timedelta(hours=24)
    poll_interval_seconds: int = 30
    proof: ProofPolicy = field(default_factory=ProofPolicy)
    service_fee_per_store: Money = Money(25000, "IDR")
