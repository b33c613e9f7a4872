from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from returns.result import Result

from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.domain.model.order import OrderId


class EventKind(str, Enum):
    ORDER_PLACED = "order_placed"
    BANK_ASSIGNED = "bank_assigned"
    PROOF_SUBMITTED = "proof_submitted"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_RETRIED = "payment_retried"
    PAYMENT_REFUNDED = "payment_refunded"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_ADVANCED = "order_advanced"


@dataclass(frozen=True)
class LifecycleEvent:
    kind: EventKind
    order_id: OrderId
    occurred_at: datetime
    order_status: str
    payment_status: str


class EventPublisher(Protocol):
    def publish(self, event: LifecycleEvent) -> Result[None, OrderCoreError]: ...
