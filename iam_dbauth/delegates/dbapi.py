"""Shared behaviour of the DB-API backed delegate drivers."""

import importlib
import logging
from collections.abc import Mapping
from types import ModuleType
from typing import Any

from iam_dbauth.config import PropertyKeys
from iam_dbauth.delegates.base import DriverPropertyInfo
from iam_dbauth.descriptor import describe
from iam_dbauth.errors import MalformedDescriptor
from iam_dbauth.models.descriptor import ConnectionDescriptor

logger = logging.getLogger(__name__)


class DBAPIDriver:
    """Base class for delegates wrapping a DB-API 2.0 module.

    The module is imported on construction, so a driver whose library is not
    installed fails when it is resolved rather than on first connect.

    Subclasses set ``module_name`` and ``schemes`` and implement
    ``connect_kwargs``.
    """

    module_name: str = ""
    schemes: tuple[str, ...] = ()
    default_port: int = 3306

    def __init__(self) -> None:
        self.module: ModuleType = importlib.import_module(self.module_name)

    def accepts_url(self, descriptor: str) -> bool:
        try:
            return describe(descriptor).scheme in self.schemes
        except MalformedDescriptor:
            return False

    def connect(self, descriptor: str, properties: Mapping[str, str]) -> Any:
        parsed = describe(descriptor)
        kwargs = self.connect_kwargs(parsed, properties)
        logger.debug(f"Opening {self.module_name} connection to {parsed.host}:{kwargs.get('port')}")
        return self.module.connect(**kwargs)

    def connect_kwargs(
        self, parsed: ConnectionDescriptor, properties: Mapping[str, str]
    ) -> dict[str, Any]:
        raise NotImplementedError

    def property_info(
        self, descriptor: str, properties: Mapping[str, str]
    ) -> list[DriverPropertyInfo]:
        parsed = describe(descriptor)
        return [
            DriverPropertyInfo(
                name=PropertyKeys.USER,
                value=properties.get(PropertyKeys.USER),
                required=True,
                description="Database user",
            ),
            DriverPropertyInfo(
                name=PropertyKeys.PASSWORD,
                value=None,
                required=True,
                description="Database password",
            ),
            DriverPropertyInfo(name="host", value=parsed.host, required=True),
            DriverPropertyInfo(
                name="port", value=str(parsed.port or self.default_port), required=False
            ),
            DriverPropertyInfo(name="database", value=parsed.database, required=False),
            DriverPropertyInfo(
                name=PropertyKeys.SSL,
                value=properties.get(PropertyKeys.SSL),
                description="Enable TLS",
                choices=("true", "false"),
            ),
            DriverPropertyInfo(
                name=PropertyKeys.SSL_CA,
                value=properties.get(PropertyKeys.SSL_CA),
                description="Path to the CA bundle",
            ),
        ]

    def major_version(self) -> int:
        return int(self.version_info()[0])

    def minor_version(self) -> int:
        return int(self.version_info()[1])

    def version_info(self) -> tuple:
        raise NotImplementedError

    def compliant(self) -> bool:
        return getattr(self.module, "apilevel", None) == "2.0"

    def parent_logger(self) -> logging.Logger:
        return logging.getLogger(self.module_name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(module={self.module_name!r})"
