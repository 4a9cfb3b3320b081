"""Layout of the documents kept in the identity backend's metadata store.

Besides real user ids, the store is keyed by synthetic ids holding
tenant-scoped documents:

    roles_list:<tenant>      {"roles": [...]}
    policy:<tenant>:<role>   {"policy": {...}}

User documents carry ``tenants`` (tenant id to role name),
``pending_invites`` (token to invite), ``requires_password_change`` and
``profile``.
"""

TENANT_ROLES_FIELD = "tenants"
PENDING_INVITES_FIELD = "pending_invites"
REQUIRES_PASSWORD_CHANGE_FIELD = "requires_password_change"
PROFILE_FIELD = "profile"
ROLES_FIELD = "roles"
POLICY_FIELD = "policy"


def roles_list_key(tenant_id: str) -> str:
    return f"roles_list:{tenant_id}"


def policy_key(tenant_id: str, role_name: str) -> str:
    return f"policy:{tenant_id}:{role_name}"
