from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from preorder_api.core.domain.model.order import Money
from preorder_api.core.domain.model.policy import LifecyclePolicy
from preorder_api.core.domain.model.proof import DEFAULT_MAX_BYTES, ProofPolicy


class Settings(BaseSettings):
    """Runtime configuration, read from ``PREORDER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PREORDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    payment_window_hours: int = Field(24, gt=0)
    poll_interval_seconds: int = Field(30, gt=0)
    proof_max_bytes: int = Field(DEFAULT_MAX_BYTES, gt=0)
    proof_allowed_types: str = "image/jpeg,image/jpg,image/png,application/pdf"
    service_fee_per_store: int = Field(25000, ge=0)
    currency: str = "IDR"
    lock_timeout_seconds: float = Field(5.0, gt=0)

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def proof_allowed_types_set(self) -> frozenset[str]:
        return frozenset(
            t.strip().lower() for t in self.proof_allowed_types.split(",") if t.strip()
        )

    def lifecycle_policy(self) -> LifecyclePolicy:
        return LifecyclePolicy(
            payment_window=timedelta(hours=self.payment_window_hours),
            poll_interval_seconds=self.poll_interval_seconds,
            proof=ProofPolicy(
                allowed_types=self.proof_allowed_types_set,
                max_bytes=self.proof_max_bytes,
            ),
            service_fee_per_store=Money(self.service_fee_per_store, self.currency),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
