from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Result, Success

from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.ports.outbound.banks import BankRegistry


@dataclass
class InMemoryBankRegistry(BankRegistry):
    banks: Sequence[Bank] = ()

    def list_active_banks(self) -> Result[Sequence[Bank], OrderCoreError]:
        return Success(tuple(b for b in self.banks if b.is_active))

    def get(self, bank_id: str) -> Result[Bank | None, OrderCoreError]:
        for bank in self.banks:
            if bank.bank_id == bank_id:
                return Success(bank)
        return Success(None)
