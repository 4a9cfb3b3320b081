"""Unit tests for the /iam/roles routes."""

from __future__ import annotations

from fastapi import status

from iam.application.value_objects import RoleSummary
from iam.domain.policy import EntityPermission, RolePolicy
from iam.domain.value_objects import EntityAction
from iam.ports.exceptions import BadRequestError, ConflictError

VIEWER = RolePolicy(
    permissions={"tickets": EntityPermission(True, frozenset({EntityAction.READ}))},
    description="Read only",
)

VIEWER_DOCUMENT = {
    "permissions": {
        "tickets": {"access": True, "actions": ["read"], "denied_fields": []}
    },
    "description": "Read only",
    "mfa_required": False,
}


class TestListAndGet:
    def test_lists_roles(self, client, rbac_service, ctx):
        rbac_service.list_roles.return_value = [
            RoleSummary(name="viewer", permissions=VIEWER.permissions),
            RoleSummary(name="legacy", permissions=None),
        ]

        response = client.get("/iam/roles")

        assert response.json() == [
            {"name": "viewer", "permissions": VIEWER_DOCUMENT["permissions"]},
            {"name": "legacy", "permissions": None},
        ]
        rbac_service.list_roles.assert_awaited_once_with(ctx)

    def test_returns_policy(self, client, rbac_service, ctx):
        rbac_service.get_role_policy.return_value = VIEWER

        response = client.get("/iam/roles/viewer")

        assert response.json() == VIEWER_DOCUMENT
        rbac_service.get_role_policy.assert_awaited_once_with(ctx, "viewer")

    def test_unknown_role_is_not_found(self, client, rbac_service):
        rbac_service.get_role_policy.return_value = None

        response = client.get("/iam/roles/ghost")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "NOT_FOUND"


class TestWrite:
    def test_creates_role_from_document(self, client, rbac_service, ctx):
        rbac_service.create_policy.return_value = VIEWER

        response = client.post(
            "/iam/roles",
            json={
                "name": "viewer",
                "policy": {
                    "permissions": {"tickets": {"access": True, "actions": ["read"]}},
                    "description": "Read only",
                },
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        rbac_service.create_policy.assert_awaited_once_with(
            ctx,
            "viewer",
            {
                "permissions": {
                    "tickets": {"access": True, "actions": ["read"], "denied_fields": []}
                },
                "description": "Read only",
                "mfa_required": False,
            },
        )

    def test_existing_role_conflicts(self, client, rbac_service):
        rbac_service.create_policy.side_effect = ConflictError("Role 'viewer' already exists.")

        response = client.post("/iam/roles", json={"name": "viewer"})

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_unknown_action_is_a_bad_request(self, client, rbac_service):
        rbac_service.update_policy.side_effect = BadRequestError("Unknown action 'fly'.")

        response = client.put(
            "/iam/roles/viewer",
            json={"permissions": {"tickets": {"access": True, "actions": ["fly"]}}},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Unknown action 'fly'."

    def test_deletes_role(self, client, rbac_service, ctx):
        response = client.delete("/iam/roles/viewer")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        rbac_service.delete_policy.assert_awaited_once_with(ctx, "viewer")

    def test_assigns_role_to_member(self, client, rbac_service, ctx):
        response = client.put("/iam/roles/viewer/members/user-2")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        rbac_service.assign_role.assert_awaited_once_with(ctx, "user-2", "viewer")
