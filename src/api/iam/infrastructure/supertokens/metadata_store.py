"""User metadata store backed by the SuperTokens usermetadata recipe."""

from __future__ import annotations

from typing import Any

from supertokens_python.recipe.usermetadata.asyncio import (
    get_user_metadata,
    update_user_metadata,
)


class SuperTokensMetadataStore:
    """IMetadataStore implementation over the usermetadata recipe.

    Updates are shallow merges; a top-level None removes the field.
    """

    async def get(self, key: str) -> dict[str, Any]:
        result = await get_user_metadata(key)
        return dict(result.metadata or {})

    async def update(self, key: str, changes: dict[str, Any]) -> dict[str, Any]:
        result = await update_user_metadata(key, changes)
        return dict(result.metadata or {})
