"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IdentitySettings(BaseSettings):
    """Identity backend settings.

    Environment variables:
        GATEHOUSE_IDENTITY_BACKEND: Provider adapter set (default: supertokens)
        GATEHOUSE_IDENTITY_CONNECTION_URI: Identity core URI (default: http://localhost:3567)
        GATEHOUSE_IDENTITY_API_KEY: Identity core API key (optional)
        GATEHOUSE_IDENTITY_APP_NAME: Application name shown in TOTP apps (default: Gatehouse)
        GATEHOUSE_IDENTITY_API_DOMAIN: Public URL of this API (default: http://localhost:8000)
        GATEHOUSE_IDENTITY_WEBSITE_DOMAIN: Frontend URL used in emailed links (default: http://localhost:5173)
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEHOUSE_IDENTITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["supertokens"] = Field(
        default="supertokens",
        description="Identity backend whose provider adapters are used",
    )
    connection_uri: str = Field(
        default="http://localhost:3567",
        description="URI of the identity backend core",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key for the identity backend core",
    )
    app_name: str = Field(default="Gatehouse", description="Application name")
    api_domain: str = Field(
        default="http://localhost:8000",
        description="Public URL of this API",
    )
    website_domain: str = Field(
        default="http://localhost:5173",
        description="Frontend URL used to build invite and reset links",
    )

    @field_validator("api_domain", "website_domain", "connection_uri")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize URLs so links can be built by concatenation."""
        return value.rstrip("/")


class ResourceBackendSettings(BaseSettings):
    """Resource backend (tenant RPC) settings.

    Environment variables:
        GATEHOUSE_RESOURCE_ADDRESS: gRPC target (default: localhost:50051)
        GATEHOUSE_RESOURCE_SERVICE_NAME: Fully qualified tenant service name
        GATEHOUSE_RESOURCE_TIMEOUT_SECONDS: Per-call deadline (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEHOUSE_RESOURCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    address: str = Field(default="localhost:50051", description="gRPC target")
    service_name: str = Field(
        default="proteus.v1.TenantService",
        description="Fully qualified name of the tenant gRPC service",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Deadline applied to every RPC",
        gt=0,
        le=300,
    )


class AuthorizationSettings(BaseSettings):
    """Authorization settings.

    Environment variables:
        GATEHOUSE_AUTHZ_GLOBAL_MFA_ENFORCED: Require MFA for every session (default: false)
        GATEHOUSE_AUTHZ_POLICY_CACHE_TTL_SECONDS: Role list and policy cache TTL (default: 600)
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEHOUSE_AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    global_mfa_enforced: bool = Field(
        default=False,
        description="Enforce MFA for every session regardless of role policy",
    )
    policy_cache_ttl_seconds: float = Field(
        default=600.0,
        description="TTL of cached role lists and policies",
        ge=0,
        le=86400,
    )


class Settings(BaseSettings):
    """Application-wide HTTP settings.

    Environment variables:
        GATEHOUSE_APP_NAME: API title (default: Gatehouse API)
        GATEHOUSE_DEBUG: Emit debug log events (default: false)
        GATEHOUSE_CORS_ORIGINS: JSON list of browser origins allowed to call the API
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEHOUSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Gatehouse API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Origins allowed to call the API from a browser",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_identity_settings() -> IdentitySettings:
    """Get cached identity backend settings."""
    return IdentitySettings()


@lru_cache
def get_resource_backend_settings() -> ResourceBackendSettings:
    """Get cached resource backend settings."""
    return ResourceBackendSettings()


@lru_cache
def get_authorization_settings() -> AuthorizationSettings:
    """Get cached authorization settings."""
    return AuthorizationSettings()
