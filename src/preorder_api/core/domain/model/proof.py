from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_ALLOWED_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "application/pdf"}
)
DEFAULT_MAX_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class ProofArtifact:
    """Metadata of a transfer proof that was already uploaded elsewhere."""

    file_ref: str
    content_type: str
    size_bytes: int


@dataclass(frozen=True)
class ProofPolicy:
    allowed_types: frozenset[str] = field(default=DEFAULT_ALLOWED_TYPES)
    max_bytes: int = DEFAULT_MAX_BYTES
