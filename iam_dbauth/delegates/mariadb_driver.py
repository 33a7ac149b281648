"""MariaDB Connector/Python delegate."""

from collections.abc import Mapping
from typing import Any

from iam_dbauth.config import PropertyKeys
from iam_dbauth.delegates.dbapi import DBAPIDriver
from iam_dbauth.models.descriptor import ConnectionDescriptor
from iam_dbauth.properties import is_truthy


class MariaDBDriver(DBAPIDriver):
    """Connects through MariaDB Connector/Python (``pip install iam-dbauth[mariadb]``)."""

    module_name = "mariadb"
    schemes = ("mariadb",)

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

        if is_truthy(properties.get(PropertyKeys.SSL)):
            kwargs["ssl"] = True
            if properties.get(PropertyKeys.SSL_CA):
                kwargs["ssl_ca"] = properties[PropertyKeys.SSL_CA]
            if properties.get(PropertyKeys.TLS_VERSIONS):
                kwargs["tls_version"] = properties[PropertyKeys.TLS_VERSIONS]
            verify = properties.get(PropertyKeys.SSL_VERIFY_CERT)
            kwargs["ssl_verify_cert"] = verify is None or is_truthy(verify)
        return kwargs

    def version_info(self) -> tuple:
        return self.module.__version_info__
