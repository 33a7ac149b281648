"""TLS trust-store handling for RDS connections.

RDS server certificates are issued by the RDS certificate authorities, which
are not part of the public trust stores. The RDS global CA bundle is packaged
under ``iam_dbauth/certs`` (see ``scripts/fetch_truststore.py``) and used as
the default trust store when the caller does not supply one.
"""

import logging
import ssl
from collections.abc import Mapping
from importlib import resources

from iam_dbauth.config import CONSTANTS, AdapterSettings, PropertyKeys
from iam_dbauth.errors import TrustStoreMissing
from iam_dbauth.properties import is_truthy

logger = logging.getLogger(__name__)

TLS_VERSIONS: dict[str, ssl.TLSVersion] = {
    "TLSv1": ssl.TLSVersion.TLSv1,
    "TLSv1.1": ssl.TLSVersion.TLSv1_1,
    "TLSv1.2": ssl.TLSVersion.TLSv1_2,
    "TLSv1.3": ssl.TLSVersion.TLSv1_3,
}


def bundled_trust_store_path(name: str = CONSTANTS.BUNDLED_TRUST_STORE) -> str | None:
    """Get the file path of the packaged CA bundle.

    Returns:
        Path to the bundle, or None if it was not packaged.
    """
    resource = resources.files("iam_dbauth.certs").joinpath(name)
    if resource.is_file():
        logger.debug("Found bundled trust store: %s", resource)
        return str(resource)
    logger.debug("No bundled trust store named %s", name)
    return None


def resolve_trust_store(settings: AdapterSettings) -> str:
    """Locate the CA bundle injected when the caller sets no ``ssl_ca``.

    A configured ``trust_store_path`` takes precedence over the packaged bundle.

    Raises:
        TrustStoreMissing: If the configured or packaged bundle does not exist
    """
    if settings.trust_store_path is not None:
        if settings.trust_store_path.is_file():
            return str(settings.trust_store_path)
        msg = f"Configured trust store {settings.trust_store_path} does not exist"
        raise TrustStoreMissing(msg)

    path = bundled_trust_store_path()
    if path is None:
        logger.info("Unable to find the embedded trust store")
        msg = f"Unable to find the embedded trust store {CONSTANTS.BUNDLED_TRUST_STORE}"
        raise TrustStoreMissing(msg)
    return path


def parse_tls_versions(value: str) -> list[ssl.TLSVersion]:
    """Parse a comma-separated TLS protocol allow-list, e.g. "TLSv1.2,TLSv1.3".

    An SSLContext only holds a minimum and maximum version, so the list must
    name a contiguous run of versions.

    Raises:
        ValueError: If a protocol name is unknown, the list is empty or has gaps
    """
    versions = []
    for name in (part.strip() for part in value.split(",")):
        if not name:
            continue
        if name not in TLS_VERSIONS:
            msg = f"Unknown TLS protocol version: {name}"
            raise ValueError(msg)
        versions.append(TLS_VERSIONS[name])
    if not versions:
        msg = "TLS protocol allow-list is empty"
        raise ValueError(msg)

    known = list(TLS_VERSIONS.values())
    positions = sorted({known.index(version) for version in versions})
    if positions != list(range(positions[0], positions[-1] + 1)):
        msg = f"TLS protocol allow-list must not skip versions: {value}"
        raise ValueError(msg)
    return [known[position] for position in positions]


def build_ssl_context(properties: Mapping[str, str]) -> ssl.SSLContext | None:
    """Build an SSL context from the transport properties.

    Returns:
        Configured SSLContext, or None when ``ssl`` is not enabled.
    """
    if not is_truthy(properties.get(PropertyKeys.SSL)):
        return None

    context = ssl.create_default_context(cafile=properties.get(PropertyKeys.SSL_CA) or None)

    tls_versions = properties.get(PropertyKeys.TLS_VERSIONS)
    if tls_versions:
        versions = parse_tls_versions(tls_versions)
        context.minimum_version = versions[0]
        context.maximum_version = versions[-1]

    verify = properties.get(PropertyKeys.SSL_VERIFY_CERT)
    if verify is not None and not is_truthy(verify):
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    return context
