"""SQLAlchemy engine factory for IAM-authenticated connections.

Every new DB-API connection the pool opens goes through the adapter, so each
one is authenticated with a freshly signed token.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool, QueuePool

from iam_dbauth.adapter import IamAuthAdapter, merged_properties
from iam_dbauth.delegates.resolver import delegate_identifier
from iam_dbauth.descriptor import parse_descriptor
from iam_dbauth.errors import ConnectionFailed, DelegateUnresolvable

logger = logging.getLogger(__name__)

# Token lifetime is 15 minutes; recycle connections at 10 minutes
# to ensure fresh tokens before expiry
IAM_TOKEN_POOL_RECYCLE_SECONDS = 600

# Delegate identifier -> SQLAlchemy dialect URL template
DIALECT_URLS = {
    "pymysql": "{scheme}+pymysql://",
    "mariadb": "mariadb+mariadbconnector://",
}


def dialect_url(
    descriptor: str,
    properties: Mapping[str, object] | None = None,
    delegate_id: str | None = None,
) -> str:
    """Pick the SQLAlchemy dialect URL matching the delegate driver.

    An adapter keeps the first delegate it resolves, so pass its
    ``delegate_id`` once resolved; otherwise the delegate is derived from
    the descriptor and properties the same way the adapter would.

    Raises:
        DelegateUnresolvable: If the delegate has no SQLAlchemy dialect
    """
    parsed = parse_descriptor(descriptor)
    identifier = delegate_id or delegate_identifier(
        parsed.scheme, merged_properties(parsed, properties)
    )
    template = DIALECT_URLS.get(identifier)
    if template is None:
        msg = f"No SQLAlchemy dialect known for delegate driver '{identifier}'"
        raise DelegateUnresolvable(msg)
    return template.format(scheme=parsed.scheme)


def make_creator(
    adapter: IamAuthAdapter, descriptor: str, properties: Mapping[str, object] | None = None
) -> Callable[[], Any]:
    """Build a pool creator that opens connections through the adapter."""

    def creator() -> Any:
        connection = adapter.connect(descriptor, properties)
        if connection is None:
            msg = "Descriptor is not an IAM descriptor; expected the 'dbapi:iam:' prefix"
            raise ConnectionFailed(msg)
        return connection

    return creator


def create_db_engine(
    descriptor: str,
    properties: Mapping[str, object] | None = None,
    adapter: IamAuthAdapter | None = None,
    *,
    pool_size: int = 5,
    max_overflow: int = 10,
    echo: bool = False,
    use_null_pool: bool = False,
) -> Engine:
    """Create a SQLAlchemy engine authenticating with RDS IAM tokens.

    When pooling:
    - Generates a fresh token for each new connection
    - Sets pool_recycle to 10 minutes (tokens expire at 15 min)
    - Pings connections before use

    Args:
        descriptor: ``dbapi:iam:`` connection descriptor
        properties: Connection properties passed to the adapter on every connect
        adapter: Adapter to connect through. If None, a new adapter is created.
        pool_size: Number of connections to keep in the pool (default: 5)
        max_overflow: Max overflow connections beyond pool_size (default: 10)
        echo: Enable SQLAlchemy query logging (default: False)
        use_null_pool: Use NullPool instead of QueuePool for testing (default: False)

    Returns:
        Configured SQLAlchemy Engine instance
    """
    if adapter is None:
        adapter = IamAuthAdapter()

    url = dialect_url(descriptor, properties, adapter.delegate_id)
    creator = make_creator(adapter, descriptor, properties)

    if use_null_pool:
        engine = create_engine(url, creator=creator, poolclass=NullPool, echo=echo)
        logger.info("Created engine with IAM authentication (NullPool)")
        return engine

    engine = create_engine(
        url,
        creator=creator,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=IAM_TOKEN_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
        echo=echo,
    )
    logger.info(
        "Created engine with IAM authentication (pool_recycle=%ds)",
        IAM_TOKEN_POOL_RECYCLE_SECONDS,
    )
    return engine
