"""Conversion from SuperTokens SDK objects to domain entities."""

from __future__ import annotations

from typing import Any, Mapping

from iam.domain.entities import User, UserProfile, datetime_from_millis
from iam.domain.value_objects import SessionTokens
from iam.infrastructure.supertokens.metadata_keys import PROFILE_FIELD


def to_domain_user(st_user: Any, metadata: Mapping[str, Any] | None = None) -> User:
    """Build a User from an SDK user and its metadata document."""
    metadata = metadata or {}
    emails = list(st_user.emails or [])
    return User(
        id=st_user.id,
        email=emails[0] if emails else "",
        time_joined=datetime_from_millis(st_user.time_joined),
        tenant_ids=tuple(st_user.tenant_ids or ()),
        profile=UserProfile.from_metadata(metadata.get(PROFILE_FIELD)),
    )


def to_session_tokens(container: Any) -> SessionTokens:
    """Extract the token pair from an SDK session container."""
    tokens = container.get_all_session_tokens_dangerously()
    return SessionTokens(
        access_token=tokens["accessToken"],
        refresh_token=tokens.get("refreshToken") or "",
    )
