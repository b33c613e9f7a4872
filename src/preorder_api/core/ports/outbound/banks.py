from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.errors import OrderCoreError


class BankRegistry(Protocol):
    def list_active_banks(self) -> Result[Sequence[Bank], OrderCoreError]: ...

    def get(self, bank_id: str) -> Result[Bank | None, OrderCoreError]: ...
