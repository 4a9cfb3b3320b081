"""Storage contracts used by the RBAC and IAM adapters.

The identity backend owns a key/value metadata store; policy documents,
role assignments and pending invites all live there. The cache contract lets
tests replace the process-wide policy cache with a deterministic fake.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IMetadataStore(Protocol):
    """Key/value JSON metadata store owned by the identity backend.

    Keys are either real user ids or synthetic keys such as
    ``policy:<tenant>:<role>``.
    """

    async def get(self, key: str) -> dict[str, Any]:
        """Return the metadata document for a key (empty when unset)."""
        ...

    async def update(self, key: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merge ``changes`` into the document and return the result.

        A top-level value of None removes that field.
        """
        ...


@runtime_checkable
class ITTLCache(Protocol):
    """Cache with per-entry expiry."""

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        ...

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value; ``ttl`` overrides the cache default (seconds)."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...
