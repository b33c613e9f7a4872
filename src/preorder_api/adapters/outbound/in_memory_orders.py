from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict

from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import (
    InvariantViolation,
    OrderCoreError,
    OrderNotFound,
    PaymentNotFound,
    TransientFailure,
    ValidationError,
)
from preorder_api.core.domain.model.order import OrderId
from preorder_api.core.domain.model.payment import PaymentId
from preorder_api.core.ports.outbound.orders import Mutation, OrderRepository


@dataclass
class InMemoryOrderRepository(OrderRepository):
    lock_timeout_seconds: float = 5.0
    fail_next: int = 0  # number of upcoming calls to fail with TransientFailure
    _store: Dict[str, OrderAggregate] = field(default_factory=dict)
    _order_by_payment: Dict[str, str] = field(default_factory=dict)
    _locks: Dict[str, threading.Lock] = field(default_factory=dict)
    _guard: threading.Lock = field(default_factory=threading.Lock)

    def add(self, aggregate: OrderAggregate) -> Result[OrderId, OrderCoreError]:
        outage = self._simulated_outage()
        if outage is not None:
            return Failure(outage)

        problems = aggregate.invariant_violations()
        if problems:
            return Failure(InvariantViolation(message="; ".join(problems)))

        key = str(aggregate.order.order_id.value)
        with self._guard:
            if key in self._store:
                return Failure(ValidationError(message="order_id already exists"))
            self._store[key] = aggregate
            self._order_by_payment[str(aggregate.payment.payment_id.value)] = key
            self._locks[key] = threading.Lock()
        return Success(aggregate.order.order_id)

    def get(self, order_id: OrderId) -> Result[OrderAggregate, OrderCoreError]:
        outage = self._simulated_outage()
        if outage is not None:
            return Failure(outage)

        key = str(order_id.value)
        with self._guard:
            aggregate = self._store.get(key)
        if aggregate is None:
            return Failure(OrderNotFound(message="order not found", order_id=key))
        return Success(aggregate)

    def find_order_id(self, payment_id: PaymentId) -> Result[OrderId, OrderCoreError]:
        key = str(payment_id.value)
        with self._guard:
            order_key = self._order_by_payment.get(key)
        if order_key is None:
            return Failure(PaymentNotFound(message="payment not found", payment_id=key))
        return Success(OrderId.parse(order_key))

    def update(
        self, order_id: OrderId, mutate: Mutation
    ) -> Result[OrderAggregate, OrderCoreError]:
        outage = self._simulated_outage()
        if outage is not None:
            return Failure(outage)

        key = str(order_id.value)
        with self._guard:
            lock = self._locks.get(key)
        if lock is None:
            return Failure(OrderNotFound(message="order not found", order_id=key))

        if not lock.acquire(timeout=self.lock_timeout_seconds):
            return Failure(TransientFailure(message=f"order {key} is locked"))
        try:
            # re-read under the lock; the caller's snapshot may be stale
            with self._guard:
                current = self._store[key]

            result = mutate(current)
            if isinstance(result, Failure):
                return result

            updated = result.unwrap()
            problems = updated.invariant_violations()
            if problems:
                return Failure(InvariantViolation(message="; ".join(problems)))

            with self._guard:
                self._store[key] = updated
            return Success(updated)
        finally:
            lock.release()

    def _simulated_outage(self) -> TransientFailure | None:
        with self._guard:
            if self.fail_next <= 0:
                return None
            self.fail_next -= 1
        return TransientFailure(message="storage unavailable")
