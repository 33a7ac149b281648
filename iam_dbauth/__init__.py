"""Connect to RDS MySQL and MariaDB with AWS profile credentials via IAM tokens."""

from iam_dbauth.adapter import IamAuthAdapter
from iam_dbauth.config import AdapterSettings
from iam_dbauth.errors import ConnectionFailed
from iam_dbauth.manager import DriverManager


def init_adapter(
    settings: AdapterSettings | None = None, *, manager: DriverManager | None = None
) -> IamAuthAdapter:
    """Create an adapter, registering it with ``manager`` when one is given.

    Call once at application startup; nothing is registered on import.
    """
    adapter = IamAuthAdapter(settings)
    if manager is not None:
        manager.register(adapter)
    return adapter


__all__ = [
    "AdapterSettings",
    "ConnectionFailed",
    "DriverManager",
    "IamAuthAdapter",
    "init_adapter",
]
