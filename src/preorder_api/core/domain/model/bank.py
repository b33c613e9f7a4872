from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Bank:
    bank_id: str
    name: str
    code: str
    account_number: str
    account_name: str
    is_active: bool = True
