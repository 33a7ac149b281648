"""Once-only resolution of the delegate driver."""

import logging
import threading
from collections.abc import Mapping

from iam_dbauth.config import CONSTANTS, PropertyKeys
from iam_dbauth.delegates.base import DelegateDriver
from iam_dbauth.delegates.registry import DelegateRegistry, default_registry
from iam_dbauth.errors import DelegateUnresolvable

logger = logging.getLogger(__name__)


def delegate_identifier(
    scheme: str | None,
    properties: Mapping[str, str],
    default_drivers: Mapping[str, str] = CONSTANTS.DEFAULT_DRIVERS,
) -> str:
    """Pick the registry identifier: explicit property, then scheme default.

    Raises:
        DelegateUnresolvable: If neither source yields an identifier
    """
    identifier = properties.get(PropertyKeys.DELEGATE_DRIVER)
    if identifier:
        return identifier
    identifier = default_drivers.get(scheme or "")
    if identifier:
        return identifier
    msg = (
        f"Driver couldn't be automatically determined. Please define "
        f"`{PropertyKeys.DELEGATE_DRIVER}` in query string or property."
    )
    raise DelegateUnresolvable(msg)


class DelegateResolver:
    """Resolves the delegate driver once and caches it.

    The first successful resolution wins: later calls return the cached driver
    even when they name a different ``delegate_driver``. An adapter that must
    reach several driver families needs one adapter instance per family.
    """

    def __init__(
        self,
        registry: DelegateRegistry | None = None,
        default_drivers: Mapping[str, str] | None = None,
    ):
        self.registry = registry or default_registry()
        self._default_drivers = dict(default_drivers or CONSTANTS.DEFAULT_DRIVERS)
        self._lock = threading.Lock()
        self._delegate: DelegateDriver | None = None
        self._identifier: str | None = None

    @property
    def delegate(self) -> DelegateDriver | None:
        return self._delegate

    @property
    def identifier(self) -> str | None:
        """Registry identifier of the cached delegate, if resolved."""
        return self._identifier

    def get_or_resolve(self, scheme: str | None, properties: Mapping[str, str]) -> DelegateDriver:
        """Return the cached delegate, resolving it on first use.

        Raises:
            DelegateUnresolvable: If no identifier can be determined or it is unknown
            DelegateLoadFailed: If the driver cannot be instantiated
        """
        delegate = self._delegate
        if delegate is not None:
            return delegate

        with self._lock:
            if self._delegate is None:
                identifier = delegate_identifier(scheme, properties, self._default_drivers)
                logger.info(f"Try resolving delegate driver: {identifier}")
                delegate = self.registry.create(identifier)
                self._identifier = identifier
                self._delegate = delegate
            return self._delegate
