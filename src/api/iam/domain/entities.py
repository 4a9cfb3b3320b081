"""Entities owned by the identity and resource backends.

These are read models: the backends are authoritative, this core only
carries their state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import UTC, datetime
from typing import Any, Mapping

from iam.domain.value_objects import PUBLIC_TENANT_ID

# Stored profile keys, in the camelCase form the identity backend keeps them.
_PROFILE_KEYS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "title": "title",
    "phone": "phone",
    "country_code": "countryCode",
    "timezone": "timezone",
    "language": "language",
    "avatar": "avatar",
}


def datetime_from_millis(value: int | float) -> datetime:
    """Convert an epoch-milliseconds timestamp to an aware datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def datetime_to_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


@dataclass(frozen=True)
class UserProfile:
    """Optional profile details kept in the user's metadata."""

    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    phone: str | None = None
    country_code: str | None = None
    timezone: str | None = None
    language: str | None = None
    avatar: str | None = None

    @classmethod
    def from_metadata(cls, data: Mapping[str, Any] | None) -> UserProfile:
        data = data or {}
        return cls(**{attr: data.get(key) for attr, key in _PROFILE_KEYS.items()})

    def to_metadata(self) -> dict[str, Any]:
        """Serialize the fields that are set."""
        return {
            key: getattr(self, attr)
            for attr, key in _PROFILE_KEYS.items()
            if getattr(self, attr) is not None
        }

    def merged_with(self, changes: UserProfile) -> UserProfile:
        """Return a profile where every field set in ``changes`` wins."""
        updates = {
            f.name: getattr(changes, f.name)
            for f in fields(changes)
            if getattr(changes, f.name) is not None
        }
        return replace(self, **updates)


@dataclass(frozen=True)
class User:
    """A user as known to the identity backend.

    Attributes:
        id: Identity-backend issued identifier
        email: Primary email address
        time_joined: When the account was created
        tenant_ids: Tenants the user is associated with
        profile: Optional profile details
    """

    id: str
    email: str
    time_joined: datetime
    tenant_ids: tuple[str, ...] = ()
    profile: UserProfile = field(default_factory=UserProfile)

    @property
    def member_tenant_ids(self) -> list[str]:
        """Tenant ids excluding the identity backend's public tenant."""
        return [tid for tid in self.tenant_ids if tid != PUBLIC_TENANT_ID]

    def is_member_of(self, tenant_id: str) -> bool:
        return tenant_id in self.tenant_ids


@dataclass(frozen=True)
class UserUpdate:
    """Requested changes to a user's credentials and profile."""

    email: str | None = None
    password: str | None = None
    current_password: str | None = None
    profile: UserProfile = field(default_factory=UserProfile)


@dataclass(frozen=True)
class UserPage:
    """One page of tenant users."""

    users: list[User]
    next_pagination_token: str | None = None


@dataclass(frozen=True)
class Tenant:
    """A tenant as stored by the resource backend."""

    id: str
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class PendingInvite:
    """An invitation waiting for its target user to accept it.

    Stored in the target user's metadata keyed by the invite token.
    """

    tenant_id: str
    role_name: str
    invited_by: str
    created_at: datetime

    @classmethod
    def from_metadata(cls, data: Mapping[str, Any]) -> PendingInvite:
        return cls(
            tenant_id=data["tenantId"],
            role_name=data["roleName"],
            invited_by=data["invitedBy"],
            created_at=datetime_from_millis(data["createdAt"]),
        )

    def to_metadata(self) -> dict[str, Any]:
        return {
            "tenantId": self.tenant_id,
            "roleName": self.role_name,
            "invitedBy": self.invited_by,
            "createdAt": datetime_to_millis(self.created_at),
        }


@dataclass(frozen=True)
class TotpDevice:
    """A TOTP device enrolled by a user.

    ``secret`` and ``qr_code`` are only populated right after creation.
    """

    name: str
    verified: bool = False
    secret: str | None = None
    qr_code: str | None = None
