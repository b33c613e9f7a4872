from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Tuple

from returns.pipeline import flow
from returns.pointfree import bind, map_
from returns.result import Failure, Result, Success

from preorder_api.core.domain.model.aggregate import (
    ChangeKind,
    OrderAggregate,
    StatusChange,
)
from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.errors import (
    InvalidBank,
    OrderCoreError,
    ValidationError,
)
from preorder_api.core.domain.model.order import (
    Clock,
    CustomerId,
    Money,
    Order,
    OrderId,
    OrderItem,
    OrderNumber,
    OrderStatus,
    StoreRef,
    fold_money,
    now_utc,
)
from preorder_api.core.domain.model.payment import (
    Payment,
    PaymentId,
    PaymentMethod,
    PaymentStatus,
)
from preorder_api.core.domain.model.policy import LifecyclePolicy
from preorder_api.core.domain.service.fee_apportionment import distinct_stores
from preorder_api.core.ports.inbound.place_order import (
    OrderReceipt,
    PlaceOrderCommand,
    PlaceOrderUseCase,
)
from preorder_api.core.ports.outbound.banks import BankRegistry
from preorder_api.core.ports.outbound.events import (
    EventKind,
    EventPublisher,
    LifecycleEvent,
)
from preorder_api.core.ports.outbound.orders import OrderRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceOrderDeps:
    orders: OrderRepository
    banks: BankRegistry
    events: EventPublisher
    policy: LifecyclePolicy = LifecyclePolicy()
    clock: Clock = now_utc


@dataclass(frozen=True)
class PlaceOrderContext:
    aggregate: OrderAggregate
    bank_id: str | None = None


@dataclass(frozen=True)
class PlaceOrderService(PlaceOrderUseCase):
    """Creates Order + Payment + items in one write, both statuses PENDING."""

    deps: PlaceOrderDeps

    def place_order(
        self, command: PlaceOrderCommand
    ) -> Result[OrderReceipt, OrderCoreError]:
        result = flow(
            command,
            _validate_command,
            bind(self._build_context),
            bind(self._attach_bank),
            bind(self._persist),
            bind(self._publish),
            map_(_to_receipt),
        )
        if isinstance(result, Failure):
            logger.info("place_order rejected: %s", result.failure())
        return result

    def _build_context(
        self, cmd: PlaceOrderCommand
    ) -> Result[PlaceOrderContext, OrderCoreError]:
        at = self.deps.clock()
        currency = self.deps.policy.service_fee_per_store.currency
        items: Tuple[OrderItem, ...] = tuple(
            OrderItem.of(
                bundle_id=ln.bundle_id,
                bundle_name=ln.bundle_name,
                store=StoreRef(ln.store_id, ln.store_name),
                quantity=ln.quantity,
                unit_price=Money.of(ln.unit_price, currency),
            )
            for ln in cmd.lines
        )
        subtotal = fold_money((it.total_price for it in items), currency=currency)
        service_fee = self.deps.policy.service_fee_per_store * len(
            distinct_stores(items)
        )
        order = Order(
            order_id=OrderId.new(),
            order_number=OrderNumber.generate(at),
            customer_id=CustomerId(cmd.customer_id),
            items=items,
            subtotal_amount=subtotal,
            service_fee=service_fee,
            total_amount=subtotal + service_fee,
            order_status=OrderStatus.PENDING,
            created_at=at,
            updated_at=at,
            pickup_date=cmd.pickup_date,
            notes=cmd.notes,
        )
        payment = Payment(
            payment_id=PaymentId.new(),
            status=PaymentStatus.PENDING,
            method=PaymentMethod.BANK_TRANSFER,
            created_at=at,
            updated_at=at,
        )
        aggregate = OrderAggregate(order=order, payment=payment).record(
            StatusChange(
                at=at,
                kind=ChangeKind.ORDER,
                from_value=None,
                to_value=OrderStatus.PENDING.value,
                actor=cmd.customer_id,
                note="order placed",
            )
        )
        return Success(PlaceOrderContext(aggregate=aggregate, bank_id=cmd.bank_id))

    def _attach_bank(
        self, ctx: PlaceOrderContext
    ) -> Result[PlaceOrderContext, OrderCoreError]:
        if ctx.bank_id is None:
            return Success(ctx)

        def attach(bank: Bank | None) -> Result[PlaceOrderContext, OrderCoreError]:
            if bank is None or not bank.is_active:
                return Failure(
                    InvalidBank(message="bank is not available", bank_id=ctx.bank_id)
                )
            agg = ctx.aggregate
            at = agg.order.created_at
            return Success(
                replace(
                    ctx,
                    aggregate=replace(
                        agg,
                        order=agg.order.with_bank(bank.bank_id, at),
                        payment=agg.payment.with_bank(bank.bank_id, at),
                        bank=bank,
                    ),
                )
            )

        return self.deps.banks.get(ctx.bank_id).bind(attach)

    def _persist(
        self, ctx: PlaceOrderContext
    ) -> Result[PlaceOrderContext, OrderCoreError]:
        return self.deps.orders.add(ctx.aggregate).map(lambda _: ctx)

    def _publish(
        self, ctx: PlaceOrderContext
    ) -> Result[PlaceOrderContext, OrderCoreError]:
        order = ctx.aggregate.order
        logger.info(
            "order placed: %s total=%s %s",
            order.order_number.value,
            order.total_amount.amount,
            order.total_amount.currency,
        )
        published = self.deps.events.publish(
            LifecycleEvent(
                kind=EventKind.ORDER_PLACED,
                order_id=order.order_id,
                occurred_at=order.created_at,
                order_status=order.order_status.value,
                payment_status=ctx.aggregate.payment_status.value,
            )
        )
        if isinstance(published, Failure):
            logger.warning(
                "event order_placed for %s was not published: %s",
                order.order_id,
                published.failure(),
            )
        return Success(ctx)


# ---- pure helpers ----------------------------------------------------------


def _validate_command(
    cmd: PlaceOrderCommand,
) -> Result[PlaceOrderCommand, OrderCoreError]:
    if not cmd.customer_id.strip():
        return Failure(ValidationError("customer_id is required"))
    if not cmd.lines:
        return Failure(ValidationError("at least one line item is required"))
    if cmd.bank_id is not None and not cmd.bank_id.strip():
        return Failure(ValidationError("bank_id must be non-empty when provided"))

    for i, ln in enumerate(cmd.lines):
        if not ln.bundle_id.strip():
            return Failure(ValidationError(f"lines[{i}].bundle_id is required"))
        if not ln.store_id.strip():
            return Failure(ValidationError(f"lines[{i}].store_id is required"))
        if ln.quantity <= 0:
            return Failure(ValidationError(f"lines[{i}].quantity must be > 0"))
        price = Decimal(str(ln.unit_price))
        if not price.is_finite() or price != price.to_integral_value():
            return Failure(
                ValidationError(f"lines[{i}].unit_price must be a whole amount")
            )
        if price <= 0:
            return Failure(ValidationError(f"lines[{i}].unit_price must be > 0"))

    return Success(cmd)


def _to_receipt(ctx: PlaceOrderContext) -> OrderReceipt:
    order = ctx.aggregate.order
    return OrderReceipt(
        order_id=order.order_id,
        order_number=order.order_number,
        payment_id=ctx.aggregate.payment.payment_id,
        subtotal=order.subtotal_amount,
        service_fee=order.service_fee,
        total=order.total_amount,
    )
