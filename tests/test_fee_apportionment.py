from __future__ import annotations

from decimal import Decimal

import pytest

from preorder_api.core.domain.model.order import Money, OrderItem, StoreRef
from preorder_api.core.domain.service.fee_apportionment import (
    apportion_service_fee,
    distinct_stores,
)


def item(store_id: str, price: int = 10000, qty: int = 1) -> OrderItem:
    return OrderItem.of(
        bundle_id=f"bundle-{store_id}-{price}",
        bundle_name="Bundle",
        store=StoreRef(store_id, store_id.upper()),
        quantity=qty,
        unit_price=Money(price),
    )


def test_single_store_gets_the_whole_fee():
    fees = apportion_service_fee([item("storeA")], Money(15000))

    assert fees.store_count == 1
    assert fees.as_mapping() == {"storeA": 15000}


def test_two_stores_split_evenly():
    fees = apportion_service_fee([item("storeA"), item("storeB")], Money(20000))

    assert fees.as_mapping() == {"storeA": 10000, "storeB": 10000}


def test_remainder_goes_to_first_store_seen():
    items = [item("s2"), item("s1"), item("s2", price=5000), item("s3")]

    fees = apportion_service_fee(items, Money(10000))

    assert [s.store.store_id for s in fees.shares] == ["s2", "s1", "s3"]
    assert [s.amount.amount for s in fees.shares] == [3334, 3333, 3333]
    assert sum(s.amount.amount for s in fees.shares) == 10000


def test_repeated_store_counts_once():
    assert len(distinct_stores([item("a"), item("a", price=1), item("b")])) == 2


def test_no_items_means_no_shares():
    fees = apportion_service_fee([], Money(25000))

    assert fees.store_count == 0
    assert fees.shares == ()


def test_money_split_rejects_zero_parts():
    with pytest.raises(ValueError):
        Money(100).split(0)


def test_money_of_rounds_half_up_to_whole_units():
    assert Money.of(Decimal("1000.5")) == Money(1001)
    assert Money.of("999.49") == Money(999)


def test_money_rejects_mixed_currencies():
    with pytest.raises(ValueError):
        Money(1, "IDR") + Money(1, "USD")
