"""Role policy model.

A role policy is the permission document attached to a (tenant, role) pair.
It maps entity names, or the wildcard ``"*"``, to an EntityPermission.
Policies are stored by the identity backend as plain JSON documents, so
both types convert to and from dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from iam.domain.value_objects import SYSTEM_IAM_ENTITY, WILDCARD, EntityAction


@dataclass(frozen=True)
class EntityPermission:
    """Access rule for a single entity.

    Attributes:
        access: Whether the entity is accessible at all
        actions: Granted actions; EntityAction.ALL grants every action
        denied_fields: Fields removed from records of this entity
    """

    access: bool
    actions: frozenset[EntityAction] = frozenset()
    denied_fields: tuple[str, ...] = ()

    def allows(self, action: EntityAction | str) -> bool:
        """Check whether this rule grants the given action."""
        if not self.access:
            return False
        return EntityAction.ALL in self.actions or action in self.actions

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EntityPermission:
        """Build a rule from its stored JSON form.

        Raises:
            ValueError: If an action is not one of create/read/update/delete/*
        """
        raw_actions = data.get("actions") or []
        try:
            actions = frozenset(EntityAction(action) for action in raw_actions)
        except ValueError as e:
            raise ValueError(f"Invalid action in {list(raw_actions)!r}") from e

        return cls(
            access=bool(data.get("access", False)),
            actions=actions,
            denied_fields=tuple(data.get("denied_fields") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "access": self.access,
            "actions": sorted(action.value for action in self.actions),
        }
        if self.denied_fields:
            result["denied_fields"] = list(self.denied_fields)
        return result


Permissions = Mapping[str, EntityPermission]


@dataclass(frozen=True)
class RolePolicy:
    """Permission document for a role within a tenant.

    Attributes:
        permissions: Rules keyed by entity name or the wildcard
        description: Optional human readable description
        mfa_required: Whether holders of the role must use MFA
    """

    permissions: Mapping[str, EntityPermission] = field(default_factory=dict)
    description: str | None = None
    mfa_required: bool = False

    @classmethod
    def root_admin(cls) -> RolePolicy:
        """Policy granted to the creator of a tenant.

        Full access to every entity, including the authorization-management
        namespace itself, with MFA required.
        """
        full_access = EntityPermission(
            access=True, actions=frozenset({EntityAction.ALL})
        )
        return cls(
            description="Root Admin Policy",
            mfa_required=True,
            permissions={
                SYSTEM_IAM_ENTITY: full_access,
                WILDCARD: full_access,
            },
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RolePolicy:
        """Build a policy from its stored JSON form.

        Raises:
            ValueError: If the document is malformed
        """
        raw_permissions = data.get("permissions") or {}
        if not isinstance(raw_permissions, Mapping):
            raise ValueError("Policy permissions must be a mapping")

        return cls(
            permissions={
                entity: EntityPermission.from_dict(rule)
                for entity, rule in raw_permissions.items()
            },
            description=data.get("description"),
            mfa_required=bool(data.get("mfa_required", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "permissions": {
                entity: rule.to_dict() for entity, rule in self.permissions.items()
            },
            "mfa_required": self.mfa_required,
        }
        if self.description is not None:
            result["description"] = self.description
        return result
