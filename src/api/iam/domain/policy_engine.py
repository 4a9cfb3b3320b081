"""Policy evaluation and field-level redaction.

Pure functions over a permission set. Access and redaction are independent
decisions: a denied access check is fatal to the operation, while redaction
silently strips fields from records the caller was already allowed to read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from iam.domain.policy import EntityPermission, Permissions
from iam.domain.value_objects import WILDCARD, EntityAction


@dataclass(frozen=True)
class AccessDecision:
    """Result of an access check."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> AccessDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> AccessDecision:
        return cls(allowed=False, reason=reason)


def find_rule(
    permissions: Permissions | None,
    entity_name: str,
) -> EntityPermission | None:
    """Return the rule governing an entity.

    An entity-specific rule is authoritative when present; the wildcard rule
    is consulted only when the entity has no rule of its own.
    """
    if not permissions:
        return None
    rule = permissions.get(entity_name)
    if rule is None:
        rule = permissions.get(WILDCARD)
    return rule


def check_access(
    permissions: Permissions | None,
    entity_name: str,
    action: EntityAction | str,
) -> AccessDecision:
    """Evaluate whether a permission set grants an action on an entity.

    Args:
        permissions: The caller's resolved permissions, or None when there is
            no session or no tenant context
        entity_name: Entity being accessed
        action: Requested action

    Returns:
        AccessDecision with the denial reason when not allowed
    """
    if permissions is None:
        return AccessDecision.deny("Access denied: No permissions found.")

    rule = find_rule(permissions, entity_name)
    if rule is None or not rule.access:
        return AccessDecision.deny(
            f"Access denied: You cannot access '{entity_name}'."
        )

    if not rule.allows(action):
        return AccessDecision.deny(
            f"Access denied: You cannot perform '{action}' on '{entity_name}'."
        )

    return AccessDecision.allow()


def redact(
    record: Mapping[str, Any] | None,
    entity_name: str,
    permissions: Permissions | None,
) -> Mapping[str, Any] | None:
    """Remove denied fields from a record's data payload.

    Records have the shape ``{"id": ..., "data": {...}}``. The input is not
    modified; a copy is returned when anything had to be removed. Never raises.
    """
    if not record or permissions is None:
        return record

    data = record.get("data")
    if not isinstance(data, Mapping):
        return record

    rule = find_rule(permissions, entity_name)
    if rule is None or not rule.denied_fields:
        return record

    denied = set(rule.denied_fields)
    if denied.isdisjoint(data):
        return record

    return {
        **record,
        "data": {key: value for key, value in data.items() if key not in denied},
    }


def redact_many(
    records: Iterable[Mapping[str, Any]] | None,
    entity_name: str,
    permissions: Permissions | None,
) -> list[Mapping[str, Any]]:
    """Apply redact() to every record of a list or page."""
    if records is None:
        return []
    return [redact(record, entity_name, permissions) for record in records]
