"""Parsed connection descriptor and signing context models."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from iam_dbauth.models.enums import DatabaseFamily


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Structured view of a connection descriptor.

    Attributes:
        url: Descriptor with the IAM marker and inline credentials stripped,
            passed as-is to the delegate driver
        scheme: Database family identifier (e.g. "mysql")
        host: Database host, None when the descriptor names none
        port: Explicit port, None when the descriptor carries none
        path: Path component (the database name prefixed with "/")
        query: Raw, still percent-encoded query string
        user_info: Raw inline "user:secret" pair, if present
    """

    url: str
    scheme: str | None
    host: str | None
    port: int | None
    path: str
    query: str
    user_info: str | None = None

    @property
    def family(self) -> DatabaseFamily | None:
        return DatabaseFamily.from_scheme(self.scheme)

    @property
    def database(self) -> str | None:
        name = self.path.lstrip("/")
        return name or None

    def __repr__(self) -> str:
        # user_info may hold a secret
        return (
            f"ConnectionDescriptor(url={self.url!r}, scheme={self.scheme!r}, "
            f"host={self.host!r}, port={self.port!r}, path={self.path!r})"
        )


@dataclass(frozen=True)
class ResolvedIdentity:
    """The database user and the AWS profile used to sign for it."""

    user: str
    profile: str


@dataclass(frozen=True)
class SigningContext:
    """Inputs of a single token signature.

    Built once per connect call and never persisted.
    """

    host: str
    port: int
    user: str
    region: str
    profile: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def create(
        cls,
        identity: ResolvedIdentity,
        host: str,
        port: int,
        region: str,
        issued_at: datetime,
        ttl_seconds: int = 900,
    ) -> "SigningContext":
        return cls(
            host=host,
            port=port,
            user=identity.user,
            region=region,
            profile=identity.profile,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=ttl_seconds),
        )

    @property
    def expires_in(self) -> int:
        """Seconds between issuance and expiry."""
        return int((self.expires_at - self.issued_at).total_seconds())
