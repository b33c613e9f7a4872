from __future__ import annotations

from dataclasses import dataclass

from returns.result import Result

from preorder_api.core.domain.model.aggregate import OrderAggregate
from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.domain.model.order import Clock, OrderId, now_utc
from preorder_api.core.domain.model.policy import LifecyclePolicy
from preorder_api.core.domain.model.proof import ProofArtifact
from preorder_api.core.domain.service import coordinator
from preorder_api.core.domain.service.lifecycle_support import (
    parse_order_id,
    parse_payment_id,
    report,
)
from preorder_api.core.ports.inbound.payment_actions import (
    AssignBankCommand,
    PaymentActionsUseCase,
    RetryPaymentCommand,
    SubmitProofCommand,
)
from preorder_api.core.ports.outbound.banks import BankRegistry
from preorder_api.core.ports.outbound.events import EventKind, EventPublisher
from preorder_api.core.ports.outbound.orders import OrderRepository


@dataclass(frozen=True)
class PaymentActionsDeps:
    orders: OrderRepository
    banks: BankRegistry
    events: EventPublisher
    policy: LifecyclePolicy = LifecyclePolicy()
    clock: Clock = now_utc


@dataclass(frozen=True)
class PaymentActionsService(PaymentActionsUseCase):
    """Customer-side payment steps: pick a bank, upload proof, retry after a failure."""

    deps: PaymentActionsDeps

    def assign_bank(
        self, command: AssignBankCommand
    ) -> Result[OrderAggregate, OrderCoreError]:
        at = self.deps.clock()

        def apply(order_id: OrderId) -> Result[OrderAggregate, OrderCoreError]:
            return self.deps.banks.get(command.bank_id).bind(
                lambda bank: self.deps.orders.update(
                    order_id,
                    lambda agg: coordinator.assign_bank(
                        agg, command.bank_id, bank, at, command.actor
                    ),
                )
            )

        result = parse_order_id(command.order_id).bind(apply)
        return report(
            "assign_bank", result, self.deps.events, EventKind.BANK_ASSIGNED, at
        )

    def submit_proof(
        self, command: SubmitProofCommand
    ) -> Result[OrderAggregate, OrderCoreError]:
        at = self.deps.clock()
        artifact = ProofArtifact(
            file_ref=command.file_ref,
            content_type=command.content_type,
            size_bytes=command.size_bytes,
        )

        def apply(order_id: OrderId) -> Result[OrderAggregate, OrderCoreError]:
            return self.deps.orders.update(
                order_id,
                lambda agg: coordinator.submit_proof(
                    agg, artifact, self.deps.policy.proof, at, command.actor
                ),
            )

        result = (
            parse_payment_id(command.payment_id)
            .bind(self.deps.orders.find_order_id)
            .bind(apply)
        )
        return report(
            "submit_proof", result, self.deps.events, EventKind.PROOF_SUBMITTED, at
        )

    def retry_payment(
        self, command: RetryPaymentCommand
    ) -> Result[OrderAggregate, OrderCoreError]:
        at = self.deps.clock()

        def apply(order_id: OrderId) -> Result[OrderAggregate, OrderCoreError]:
            return self.deps.orders.update(
                order_id, lambda agg: coordinator.retry(agg, at, command.actor)
            )

        result = (
            parse_payment_id(command.payment_id)
            .bind(self.deps.orders.find_order_id)
            .bind(apply)
        )
        return report(
            "retry_payment", result, self.deps.events, EventKind.PAYMENT_RETRIED, at
        )
