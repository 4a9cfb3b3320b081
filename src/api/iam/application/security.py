"""Secret generation for invitations and provisioned accounts.

Uses cryptographically secure random generation. Hashing and storage of
credentials are left to the identity backend.
"""

import secrets

INVITE_TOKEN_BYTES = 32

# Appended to generated passwords so they satisfy the identity backend's
# default password policy (letters, digits and a symbol).
_PASSWORD_POLICY_SUFFIX = "!Aa1"


def generate_invite_token() -> str:
    """Generate a one-time invitation token.

    Returns:
        64 hex characters (32 random bytes)
    """
    return secrets.token_hex(INVITE_TOKEN_BYTES)


def generate_temporary_password() -> str:
    """Generate a temporary password for an auto-provisioned user.

    The user is flagged to change it on first login.
    """
    return secrets.token_hex(12) + _PASSWORD_POLICY_SUFFIX
