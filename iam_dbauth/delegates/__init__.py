"""Delegate DB-API drivers the adapter forwards connections to."""

from iam_dbauth.delegates.base import DelegateDriver, DriverPropertyInfo
from iam_dbauth.delegates.registry import DelegateRegistry, default_registry
from iam_dbauth.delegates.resolver import DelegateResolver

__all__ = [
    "DelegateDriver",
    "DelegateRegistry",
    "DelegateResolver",
    "DriverPropertyInfo",
    "default_registry",
]
