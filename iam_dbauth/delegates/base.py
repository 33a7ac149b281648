"""Delegate driver protocol definitions."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class DriverPropertyInfo:
    """Describes a connection property a driver understands."""

    name: str
    value: str | None = None
    required: bool = False
    description: str = ""
    choices: tuple[str, ...] = field(default_factory=tuple)


class DelegateDriver(Protocol):
    """Protocol for the DB-API drivers the adapter forwards connections to.

    Implementations receive the stripped ``dbapi:<scheme>://`` descriptor and
    the final property set, including the generated token as ``password``.
    """

    def accepts_url(self, descriptor: str) -> bool:
        """Return True if the driver can handle the descriptor."""
        ...

    def connect(self, descriptor: str, properties: Mapping[str, str]) -> Any:
        """Open a DB-API connection."""
        ...

    def property_info(
        self, descriptor: str, properties: Mapping[str, str]
    ) -> list[DriverPropertyInfo]:
        """List the properties the driver understands for this descriptor."""
        ...

    def major_version(self) -> int:
        ...

    def minor_version(self) -> int:
        ...

    def compliant(self) -> bool:
        """Return True if the driver implements DB-API 2.0."""
        ...

    def parent_logger(self) -> logging.Logger:
        """Return the logger the driver library logs through."""
        ...
