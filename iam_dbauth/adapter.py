"""IAM authentication adapter.

Intercepts ``dbapi:iam:`` connection descriptors, replaces the password (an
AWS profile name) with a short-lived RDS IAM token and forwards the connection
to a delegate DB-API driver over TLS.

Connection flow:
1. Strip the IAM marker and inline credentials from the descriptor
2. Merge caller properties, query string and inline credentials
3. Resolve the delegate driver (once per adapter)
4. Resolve user, AWS profile, host, port and signing region
5. Sign a token valid for 15 minutes
6. Force TLS properties and the CA bundle, then call the delegate
"""

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from iam_dbauth.aws.region import RegionResolver
from iam_dbauth.aws.token import TokenSigner
from iam_dbauth.common.log_utils import redact_properties
from iam_dbauth.common.tls import resolve_trust_store
from iam_dbauth.config import CONSTANTS, AdapterSettings, PropertyKeys
from iam_dbauth.delegates.base import DelegateDriver, DriverPropertyInfo
from iam_dbauth.delegates.resolver import DelegateResolver
from iam_dbauth.descriptor import assert_not_null, is_iam_descriptor, parse_descriptor
from iam_dbauth.errors import (
    ConnectionFailed,
    MissingHost,
    MissingIdentity,
    MissingPort,
    UnsupportedFeature,
)
from iam_dbauth.models.descriptor import ConnectionDescriptor, ResolvedIdentity, SigningContext
from iam_dbauth.properties import merge_properties, parse_query_string, parse_user_info

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def resolve_identity(properties: Mapping[str, str]) -> ResolvedIdentity:
    """Extract the database user and the AWS profile (given as ``password``).

    Raises:
        MissingIdentity: If either value is absent or empty
    """
    user = properties.get(PropertyKeys.USER)
    if not user:
        msg = "User couldn't be automatically determined. Please define `user` in query string or property."
        raise MissingIdentity(msg)

    profile = properties.get(PropertyKeys.PASSWORD)
    if not profile:
        msg = (
            "Password/AWS profile isn't specified. Please define the AWS profile "
            "as `password` in query string or property."
        )
        raise MissingIdentity(msg)

    return ResolvedIdentity(user=user, profile=profile)


def resolve_host(descriptor: ConnectionDescriptor) -> str:
    if descriptor.host:
        return descriptor.host
    msg = "No database host specified. IAM auth requires that a host be specified in the descriptor."
    raise MissingHost(msg)


def resolve_port(descriptor: ConnectionDescriptor) -> int:
    if descriptor.port is not None:
        return descriptor.port
    default = CONSTANTS.DEFAULT_PORTS.get(descriptor.scheme or "")
    if default is not None:
        return default
    msg = (
        "No database port specified. IAM auth requires that either a default port "
        "be pre-configured or a port is specified in the descriptor."
    )
    raise MissingPort(msg)


def merged_properties(
    descriptor: ConnectionDescriptor, properties: Mapping[str, object] | None
) -> dict[str, str]:
    return merge_properties(
        properties,
        parse_query_string(descriptor.query),
        parse_user_info(descriptor.user_info),
    )


class IamAuthAdapter:
    """Connection adapter that authenticates with RDS IAM tokens.

    Create one with ``init_adapter()``. An adapter is safe to share between
    threads; the delegate driver is resolved once and then reused.
    """

    def __init__(
        self,
        settings: AdapterSettings | None = None,
        *,
        delegate_resolver: DelegateResolver | None = None,
        region_resolver: RegionResolver | None = None,
        token_signer: TokenSigner | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings or AdapterSettings()
        self._delegates = delegate_resolver or DelegateResolver()
        self._regions = region_resolver or RegionResolver()
        self._signer = token_signer or TokenSigner(signing_name=self.settings.signing_name)
        self._clock = clock

    @property
    def delegate(self) -> DelegateDriver | None:
        return self._delegates.delegate

    @property
    def delegate_id(self) -> str | None:
        """Registry identifier of the resolved delegate, e.g. "pymysql"."""
        return self._delegates.identifier

    def accepts_url(self, descriptor: str | None) -> bool:
        assert_not_null(descriptor)
        return is_iam_descriptor(descriptor)

    def connect(self, descriptor: str | None, properties: Mapping[str, object] | None = None) -> Any:
        """Open a connection through the delegate driver with an IAM token.

        Args:
            descriptor: ``dbapi:iam:<scheme>://[user:profile@]host[:port]/db[?query]``
            properties: Caller properties; never modified

        Returns:
            The delegate's connection, or None if the descriptor is not an IAM descriptor

        Raises:
            ConnectionFailed: Any resolution, credential or signing failure
        """
        if not self.accepts_url(descriptor):
            return None

        parsed = parse_descriptor(descriptor)
        merged = merged_properties(parsed, properties)

        delegate = self._delegates.get_or_resolve(parsed.scheme, merged)

        identity = resolve_identity(merged)
        host = resolve_host(parsed)
        port = resolve_port(parsed)
        region = self._regions.resolve(merged, host, identity.profile)

        logger.info(
            f"Generating RDS IAM auth token for: AwsProfile={identity.profile}, "
            f"AwsRegion={region}, Host={host}, Port={port}, User={identity.user}"
        )
        context = SigningContext.create(
            identity,
            host=host,
            port=port,
            region=region,
            issued_at=self._clock(),
            ttl_seconds=self.settings.token_ttl_seconds,
        )
        token = self._signer.generate_auth_token(context)

        connect_properties = self.build_connect_properties(merged, identity, token)
        logger.info(
            f"Connecting with descriptor: {parsed.url} and properties: "
            f"{redact_properties(connect_properties)}"
        )
        return delegate.connect(parsed.url, connect_properties)

    def build_connect_properties(
        self, merged: Mapping[str, str], identity: ResolvedIdentity, token: str
    ) -> dict[str, str]:
        """Assemble the property set handed to the delegate driver.

        Raises:
            TrustStoreMissing: If no ``ssl_ca`` is set and no CA bundle can be found
        """
        connect_properties = dict(merged)
        connect_properties[PropertyKeys.PASSWORD] = token
        connect_properties[PropertyKeys.USER] = identity.user
        connect_properties[PropertyKeys.SSL] = "true"
        connect_properties[PropertyKeys.SSL_REQUIRED] = "true"

        connect_properties.setdefault(PropertyKeys.TLS_VERSIONS, self.settings.tls_versions)
        connect_properties.setdefault(
            PropertyKeys.SSL_VERIFY_CERT, str(self.settings.verify_server_certificate).lower()
        )
        if PropertyKeys.SSL_CA not in merged:
            connect_properties[PropertyKeys.SSL_CA] = resolve_trust_store(self.settings)
        return connect_properties

    def property_info(
        self, descriptor: str | None, properties: Mapping[str, object] | None = None
    ) -> list[DriverPropertyInfo]:
        """List the delegate's connection properties for a descriptor.

        Attempts to resolve the delegate first; returns an empty list when that fails.
        """
        assert_not_null(descriptor)
        parsed = parse_descriptor(descriptor)
        merged = merged_properties(parsed, properties)

        try:
            self._delegates.get_or_resolve(parsed.scheme, merged)
        except ConnectionFailed as e:
            logger.debug("Attempt to resolve delegate driver failed", exc_info=e)

        delegate = self.delegate
        if delegate is None:
            self._log_delegate_not_initialised("property_info")
            return []
        return delegate.property_info(parsed.url, merged)

    def major_version(self) -> int:
        delegate = self.delegate
        if delegate is None:
            self._log_delegate_not_initialised("major_version")
            return -1
        return delegate.major_version()

    def minor_version(self) -> int:
        delegate = self.delegate
        if delegate is None:
            self._log_delegate_not_initialised("minor_version")
            return -1
        return delegate.minor_version()

    def compliant(self) -> bool:
        delegate = self.delegate
        if delegate is None:
            self._log_delegate_not_initialised("compliant")
            return False
        return delegate.compliant()

    def parent_logger(self) -> logging.Logger:
        """Return the delegate library's logger.

        Raises:
            UnsupportedFeature: If the delegate driver is not resolved yet
        """
        delegate = self.delegate
        if delegate is None:
            self._log_delegate_not_initialised("parent_logger")
            raise UnsupportedFeature("Delegate driver not initialised")
        return delegate.parent_logger()

    @staticmethod
    def _log_delegate_not_initialised(method: str) -> None:
        logger.warning(
            f"Method {method} called, but delegate driver not initialised, returning placeholder value"
        )
