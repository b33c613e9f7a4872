from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from preorder_api.adapters.outbound.in_memory_banks import InMemoryBankRegistry
from preorder_api.adapters.outbound.in_memory_orders import InMemoryOrderRepository
from preorder_api.adapters.outbound.logging_events import LoggingEventPublisher
from preorder_api.config import Settings, get_settings
from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.order import Clock, now_utc
from preorder_api.core.domain.service.get_order_service import (
    GetOrderDeps,
    GetOrderService,
)
from preorder_api.core.domain.service.list_banks_service import (
    ListBanksDeps,
    ListBanksService,
)
from preorder_api.core.domain.service.order_actions_service import (
    OrderActionsDeps,
    OrderActionsService,
)
from preorder_api.core.domain.service.payment_actions_service import (
    PaymentActionsDeps,
    PaymentActionsService,
)
from preorder_api.core.domain.service.place_order_service import (
    PlaceOrderDeps,
    PlaceOrderService,
)
from preorder_api.core.domain.service.verification_service import (
    VerificationDeps,
    VerificationService,
)
from preorder_api.core.ports.outbound.events import EventPublisher

# Destination accounts offered until a real bank registry is wired in.
DEFAULT_BANKS: tuple[Bank, ...] = (
    Bank("bca", "Bank Central Asia", "BCA", "1234567890", "PT Preorder Nusantara"),
    Bank("bni", "Bank Negara Indonesia", "BNI", "0987654321", "PT Preorder Nusantara"),
    Bank("mandiri", "Bank Mandiri", "MANDIRI", "1122334455", "PT Preorder Nusantara"),
)


@dataclass(frozen=True)
class UseCases:
    place_order: PlaceOrderService
    get_order: GetOrderService
    payment_actions: PaymentActionsService
    order_actions: OrderActionsService
    verification: VerificationService
    list_banks: ListBanksService
    orders: InMemoryOrderRepository


def build_usecases(
    settings: Settings | None = None,
    clock: Clock = now_utc,
    banks: Sequence[Bank] = DEFAULT_BANKS,
    events: EventPublisher | None = None,
) -> UseCases:
    settings = settings or get_settings()
    policy = settings.lifecycle_policy()

    orders = InMemoryOrderRepository(
        lock_timeout_seconds=settings.lock_timeout_seconds
    )
    registry = InMemoryBankRegistry(banks=tuple(banks))
    publisher = events or LoggingEventPublisher()

    return UseCases(
        place_order=PlaceOrderService(
            PlaceOrderDeps(
                orders=orders,
                banks=registry,
                events=publisher,
                policy=policy,
                clock=clock,
            )
        ),
        get_order=GetOrderService(
            GetOrderDeps(orders=orders, policy=policy, clock=clock)
        ),
        payment_actions=PaymentActionsService(
            PaymentActionsDeps(
                orders=orders,
                banks=registry,
                events=publisher,
                policy=policy,
                clock=clock,
            )
        ),
        order_actions=OrderActionsService(
            OrderActionsDeps(orders=orders, events=publisher, clock=clock)
        ),
        verification=VerificationService(
            VerificationDeps(orders=orders, events=publisher, clock=clock)
        ),
        list_banks=ListBanksService(ListBanksDeps(banks=registry)),
        orders=orders,
    )
