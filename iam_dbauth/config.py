"""Configuration and constants for the IAM database authentication adapter.

This module defines the fixed protocol constants (descriptor prefixes, default
ports, the default delegate table) and the tunable adapter settings.

Configuration can be overridden via:
1. Environment variables (e.g., IAM_DBAUTH_TOKEN_TTL_SECONDS=600)
2. .env file in the current directory
3. Default values in code
"""

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class AdapterConstants:
    """Protocol constants for descriptor handling and token signing.

    These are NOT configurable - they define the descriptor grammar and the
    RDS authentication protocol, and must never vary between deployments.
    """

    # Descriptor grammar: dbapi:iam:<scheme>://...
    URL_PREFIX: str = "dbapi:"
    IAM_MARKER: str = "iam:"

    # Ports used when the descriptor does not carry one
    DEFAULT_PORTS: dict[str, int] = field(
        default_factory=lambda: {"mysql": 3306, "mariadb": 3306}
    )

    # Scheme -> delegate registry identifier
    DEFAULT_DRIVERS: dict[str, str] = field(
        default_factory=lambda: {"mysql": "pymysql", "mariadb": "mariadb"}
    )

    # RDS connect action signed into every token
    CONNECT_ACTION: str = "connect"
    SIGNING_SCHEME: str = "https://"

    # Name of the packaged CA bundle under iam_dbauth/certs
    BUNDLED_TRUST_STORE: str = "rds-global-bundle.pem"

    @property
    def iam_prefix(self) -> str:
        return self.URL_PREFIX + self.IAM_MARKER


# Module-level singleton for protocol constants
CONSTANTS = AdapterConstants()


class PropertyKeys:
    """Property names understood by the adapter (case-sensitive)."""

    USER = "user"
    PASSWORD = "password"
    AWS_REGION = "aws_region"
    DELEGATE_DRIVER = "delegate_driver"

    # Transport security
    SSL = "ssl"
    SSL_REQUIRED = "ssl_required"
    TLS_VERSIONS = "tls_versions"
    SSL_VERIFY_CERT = "ssl_verify_cert"
    SSL_CA = "ssl_ca"

    @classmethod
    def secret(cls) -> list[str]:
        """Keys whose values must never be logged."""
        return [cls.PASSWORD]


class AdapterSettings(BaseSettings):
    """Tunable adapter settings.

    Can be overridden via environment variables with IAM_DBAUTH_ prefix:
    - IAM_DBAUTH_TOKEN_TTL_SECONDS
    - IAM_DBAUTH_SIGNING_NAME
    - IAM_DBAUTH_TLS_VERSIONS
    - IAM_DBAUTH_VERIFY_SERVER_CERTIFICATE
    - IAM_DBAUTH_TRUST_STORE_PATH

    Attributes:
        token_ttl_seconds: Validity window of generated tokens (RDS caps this at 15 minutes)
        signing_name: SigV4 service name tokens are scoped to
        tls_versions: Default TLS protocol allow-list when the caller sets none
        verify_server_certificate: Default certificate verification flag
        trust_store_path: CA bundle used instead of the packaged RDS bundle
    """

    model_config = SettingsConfigDict(
        env_prefix="IAM_DBAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    token_ttl_seconds: int = Field(
        default=900, ge=1, le=900, description="Token validity window (seconds)"
    )
    signing_name: str = Field(default="rds-db", description="SigV4 signing service name")
    tls_versions: str = Field(
        default="TLSv1.2,TLSv1.3", description="Default TLS protocol allow-list"
    )
    verify_server_certificate: bool = Field(
        default=True, description="Default server certificate verification flag"
    )
    trust_store_path: Path | None = Field(
        default=None, description="Override for the packaged RDS CA bundle"
    )

    @field_validator("signing_name", "tls_versions")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "Signing name and TLS versions cannot be empty"
            raise ValueError(msg)
        return v.strip()
