"""Minimal driver manager selecting a driver by asking each one in turn."""

import logging
import threading
from collections.abc import Mapping
from typing import Any, Protocol

from iam_dbauth.descriptor import assert_not_null
from iam_dbauth.errors import ConnectionFailed

logger = logging.getLogger(__name__)


class Driver(Protocol):
    """Anything that can claim a descriptor and connect to it."""

    def accepts_url(self, descriptor: str) -> bool:
        ...

    def connect(self, descriptor: str, properties: Mapping[str, object] | None = None) -> Any:
        """Return a connection, or None when the descriptor is not for this driver."""
        ...


class DriverManager:
    """Holds registered drivers in registration order."""

    def __init__(self) -> None:
        self._drivers: list[Driver] = []
        self._lock = threading.Lock()

    def register(self, driver: Driver) -> None:
        with self._lock:
            if driver not in self._drivers:
                logger.info(f"Registering driver {type(driver).__name__}")
                self._drivers.append(driver)

    def deregister(self, driver: Driver) -> None:
        with self._lock:
            if driver in self._drivers:
                self._drivers.remove(driver)

    def drivers(self) -> list[Driver]:
        with self._lock:
            return list(self._drivers)

    def get_connection(
        self, descriptor: str, properties: Mapping[str, object] | None = None
    ) -> Any:
        """Connect through the first registered driver that accepts the descriptor.

        Raises:
            ConnectionFailed: If no registered driver handles the descriptor, or
                the first driver that tried failed
        """
        assert_not_null(descriptor)
        for driver in self.drivers():
            connection = driver.connect(descriptor, properties)
            if connection is not None:
                return connection
        msg = f"No suitable driver found for {descriptor.split('@')[-1]}"
        raise ConnectionFailed(msg)
