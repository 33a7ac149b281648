"""Registry of delegate driver factories keyed by identifier."""

import logging
from collections.abc import Callable

from iam_dbauth.delegates.base import DelegateDriver
from iam_dbauth.delegates.mariadb_driver import MariaDBDriver
from iam_dbauth.delegates.pymysql_driver import PyMySQLDriver
from iam_dbauth.errors import DelegateLoadFailed, DelegateUnresolvable

logger = logging.getLogger(__name__)

DriverFactory = Callable[[], DelegateDriver]


class DelegateRegistry:
    """Maps delegate identifiers (e.g. "pymysql") to driver factories."""

    def __init__(self, factories: dict[str, DriverFactory] | None = None):
        self._factories: dict[str, DriverFactory] = dict(factories or {})

    def register(self, identifier: str, factory: DriverFactory) -> None:
        self._factories[identifier] = factory

    def identifiers(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._factories

    def create(self, identifier: str) -> DelegateDriver:
        """Instantiate the driver registered under ``identifier``.

        Raises:
            DelegateUnresolvable: If nothing is registered under the identifier
            DelegateLoadFailed: If the factory raises for any reason
        """
        factory = self._factories.get(identifier)
        if factory is None:
            msg = (
                f"Unknown delegate driver '{identifier}'. "
                f"Registered drivers: {', '.join(self.identifiers()) or 'none'}"
            )
            raise DelegateUnresolvable(msg)
        try:
            return factory()
        except Exception as e:
            raise DelegateLoadFailed(f"Unable to load delegate driver '{identifier}': {e}") from e


def default_registry() -> DelegateRegistry:
    """Registry with the built-in DB-API drivers."""
    return DelegateRegistry({"pymysql": PyMySQLDriver, "mariadb": MariaDBDriver})
