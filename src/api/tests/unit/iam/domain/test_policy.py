"""Unit tests for the role policy model."""

import pytest

from iam.domain.policy import EntityPermission, RolePolicy
from iam.domain.value_objects import SYSTEM_IAM_ENTITY, WILDCARD, EntityAction


class TestEntityPermission:
    """Tests for EntityPermission."""

    def test_from_dict(self):
        rule = EntityPermission.from_dict(
            {"access": True, "actions": ["read", "update"], "denied_fields": ["ssn"]}
        )

        assert rule.access
        assert rule.actions == {EntityAction.READ, EntityAction.UPDATE}
        assert rule.denied_fields == ("ssn",)

    def test_from_dict_rejects_unknown_action(self):
        with pytest.raises(ValueError, match="Invalid action"):
            EntityPermission.from_dict({"access": True, "actions": ["publish"]})

    def test_missing_access_denies(self):
        rule = EntityPermission.from_dict({"actions": ["read"]})

        assert not rule.allows(EntityAction.READ)

    def test_to_dict_omits_empty_denied_fields(self):
        rule = EntityPermission(access=True, actions=frozenset({EntityAction.READ}))

        assert rule.to_dict() == {"access": True, "actions": ["read"]}


class TestRolePolicy:
    """Tests for RolePolicy."""

    def test_root_admin_grants_everything_and_requires_mfa(self):
        policy = RolePolicy.root_admin()

        assert policy.mfa_required
        assert policy.description == "Root Admin Policy"
        for entity in (SYSTEM_IAM_ENTITY, WILDCARD):
            assert policy.permissions[entity].allows(EntityAction.DELETE)

    def test_dict_conversion_preserves_policy(self):
        policy = RolePolicy(
            permissions={
                "tickets": EntityPermission(
                    access=True,
                    actions=frozenset({EntityAction.READ}),
                    denied_fields=("cost",),
                )
            },
            description="Support",
            mfa_required=True,
        )

        assert RolePolicy.from_dict(policy.to_dict()) == policy

    def test_from_dict_rejects_non_mapping_permissions(self):
        with pytest.raises(ValueError):
            RolePolicy.from_dict({"permissions": ["tickets"]})

    def test_from_dict_defaults(self):
        policy = RolePolicy.from_dict({})

        assert policy.permissions == {}
        assert not policy.mfa_required
        assert policy.description is None
