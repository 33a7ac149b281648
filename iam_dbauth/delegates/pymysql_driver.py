"""PyMySQL delegate for MySQL and MariaDB."""

from collections.abc import Mapping
from typing import Any

from iam_dbauth.common.tls import build_ssl_context
from iam_dbauth.config import PropertyKeys
from iam_dbauth.delegates.dbapi import DBAPIDriver
from iam_dbauth.models.descriptor import ConnectionDescriptor


class PyMySQLDriver(DBAPIDriver):
    """Connects through PyMySQL.

    PyMySQL answers the ``mysql_clear_password`` authentication request RDS
    sends for IAM users, so the token is accepted as a plain password over TLS.
    """

    module_name = "pymysql"
    schemes = ("mysql", "mariadb")

    def connect_kwargs(
        self, parsed: ConnectionDescriptor, properties: Mapping[str, str]
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "host": parsed.host,
            "port": parsed.port or self.default_port,
            "user": properties.get(PropertyKeys.USER),
            "password": properties.get(PropertyKeys.PASSWORD),
        }
        if parsed.database:
            kwargs["database"] = parsed.database

        ssl_context = build_ssl_context(properties)
        if ssl_context is not None:
            kwargs["ssl"] = ssl_context
        return kwargs

    def version_info(self) -> tuple:
        return self.module.VERSION
