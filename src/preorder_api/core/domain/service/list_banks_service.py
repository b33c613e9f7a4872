from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Result

from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.errors import OrderCoreError
from preorder_api.core.ports.inbound.list_banks import ListBanksUseCase
from preorder_api.core.ports.outbound.banks import BankRegistry


@dataclass(frozen=True)
class ListBanksDeps:
    banks: BankRegistry


@dataclass(frozen=True)
class ListBanksService(ListBanksUseCase):
    deps: ListBanksDeps

    def list_active_banks(self) -> Result[Sequence[Bank], OrderCoreError]:
        return self.deps.banks.list_active_banks().map(
            lambda banks: tuple(sorted(banks, key=lambda b: b.name))
        )
