from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from preorder_api.core.domain.model.order import Money, OrderItem, StoreRef


@dataclass(frozen=True)
class StoreShare:
    store: StoreRef
    amount: Money


@dataclass(frozen=True)
class FeeApportionment:
    store_count: int
    service_fee: Money
    shares: Tuple[StoreShare, ...]

    def as_mapping(self) -> dict[str, int]:
        return {s.store.store_id: s.amount.amount for s in self.shares}


def distinct_stores(items: Iterable[OrderItem]) -> Tuple[StoreRef, ...]:
    """Stores in order of first appearance."""
    seen: dict[str, StoreRef] = {}
    for it in items:
        seen.setdefault(it.store.store_id, it.store)
    return tuple(seen.values())


def apportion_service_fee(
    items: Iterable[OrderItem], service_fee: Money
) -> FeeApportionment:
    """Split an order-level shipping fee evenly across the stores in the order.

    Read-only: the result is for display and reporting and never feeds back
    into ``Order.service_fee``. Each store gets ``fee // n``; whatever integer
    division leaves over is attributed to the first store.
    """
    stores = distinct_stores(items)
    if not stores:
        return FeeApportionment(store_count=0, service_fee=service_fee, shares=())

    amounts = service_fee.split(len(stores))
    return FeeApportionment(
        store_count=len(stores),
        service_fee=service_fee,
        shares=tuple(StoreShare(store=s, amount=a) for s, a in zip(stores, amounts)),
    )
