"""IAM presentation layer, organized per aggregate.

Each package holds its own routes and models. Every route resolves the
caller through ``get_request_context``; the session trust gate is applied by
the services, not at the router level.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation import account, auth, mfa, roles, tenants
from iam.presentation.errors import register_exception_handlers

router = APIRouter(
    prefix="/iam",
    tags=["iam"],
)

router.include_router(auth.router)
router.include_router(account.router)
router.include_router(tenants.router)
router.include_router(roles.router)
router.include_router(mfa.router)

__all__ = ["register_exception_handlers", "router"]
