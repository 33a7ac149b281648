"""Unit tests for delegate driver registry, resolution and DB-API drivers."""

import logging
import ssl
import threading
import time
from unittest.mock import MagicMock, patch

import pymysql
import pytest

from iam_dbauth.delegates.mariadb_driver import MariaDBDriver
from iam_dbauth.delegates.pymysql_driver import PyMySQLDriver
from iam_dbauth.delegates.registry import DelegateRegistry, default_registry
from iam_dbauth.delegates.resolver import DelegateResolver, delegate_identifier
from iam_dbauth.descriptor import describe
from iam_dbauth.errors import DelegateLoadFailed, DelegateUnresolvable


class TestDelegateRegistry:
    def test_creates_registered_driver(self, delegate):
        registry = DelegateRegistry({"fake": lambda: delegate})

        assert registry.create("fake") is delegate
        assert "fake" in registry

    def test_unknown_identifier(self):
        with pytest.raises(DelegateUnresolvable, match="com.mysql.cj.jdbc.Driver"):
            DelegateRegistry().create("com.mysql.cj.jdbc.Driver")

    def test_factory_failure_is_wrapped(self):
        error = ImportError("No module named 'mariadb'")
        registry = DelegateRegistry({"mariadb": MagicMock(side_effect=error)})

        with pytest.raises(DelegateLoadFailed, match="mariadb") as exc_info:
            registry.create("mariadb")

        assert exc_info.value.__cause__ is error

    def test_default_registry(self):
        assert default_registry().identifiers() == ["mariadb", "pymysql"]


class TestDelegateIdentifier:
    def test_explicit_property_wins(self):
        assert delegate_identifier("mysql", {"delegate_driver": "mariadb"}) == "mariadb"

    def test_scheme_defaults(self):
        assert delegate_identifier("mysql", {}) == "pymysql"
        assert delegate_identifier("mariadb", {}) == "mariadb"

    def test_unknown_scheme(self):
        with pytest.raises(DelegateUnresolvable, match="delegate_driver"):
            delegate_identifier("postgresql", {})


class TestDelegateResolver:
    """The first resolved delegate is kept for the resolver's lifetime."""

    def test_resolves_once(self):
        first, second = MagicMock(name="first"), MagicMock(name="second")
        first_factory = MagicMock(return_value=first)
        registry = DelegateRegistry({"first": first_factory, "second": lambda: second})
        resolver = DelegateResolver(registry)

        assert resolver.get_or_resolve("mysql", {"delegate_driver": "first"}) is first
        assert resolver.get_or_resolve("mysql", {"delegate_driver": "second"}) is first
        assert resolver.delegate is first
        first_factory.assert_called_once_with()
        assert resolver.identifier == "first"

    def test_failed_resolution_is_not_cached(self, delegate):
        registry = DelegateRegistry({"pymysql": lambda: delegate})
        resolver = DelegateResolver(registry)

        with pytest.raises(DelegateUnresolvable):
            resolver.get_or_resolve("postgresql", {})
        assert resolver.delegate is None
        assert resolver.identifier is None

        assert resolver.get_or_resolve("mysql", {}) is delegate

    def test_concurrent_first_resolution_loads_once(self, delegate):
        calls = []

        def slow_factory():
            calls.append(1)
            time.sleep(0.05)
            return delegate

        resolver = DelegateResolver(DelegateRegistry({"pymysql": slow_factory}))
        barrier = threading.Barrier(8)
        results = []

        def resolve():
            barrier.wait()
            results.append(resolver.get_or_resolve("mysql", {}))

        threads = [threading.Thread(target=resolve) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert results == [delegate] * 8


class TestPyMySQLDriver:
    def test_accepts_mysql_and_mariadb(self):
        driver = PyMySQLDriver()

        assert driver.accepts_url("dbapi:mysql://db.example.com/app")
        assert driver.accepts_url("dbapi:mariadb://db.example.com/app")
        assert not driver.accepts_url("dbapi:postgresql://db.example.com/app")
        assert not driver.accepts_url("mysql://db.example.com/app")

    def test_connect_kwargs(self):
        driver = PyMySQLDriver()
        parsed = describe("dbapi:mysql://db.example.com/app")

        kwargs = driver.connect_kwargs(
            parsed,
            {"user": "app", "password": "token", "ssl": "true", "ssl_verify_cert": "false"},
        )

        assert kwargs["host"] == "db.example.com"
        assert kwargs["port"] == 3306
        assert kwargs["database"] == "app"
        assert kwargs["user"] == "app"
        assert kwargs["password"] == "token"
        assert isinstance(kwargs["ssl"], ssl.SSLContext)
        assert kwargs["ssl"].verify_mode == ssl.CERT_NONE

    def test_no_ssl_when_disabled(self):
        kwargs = PyMySQLDriver().connect_kwargs(
            describe("dbapi:mysql://db.example.com:3307/"), {"user": "app", "password": "token"}
        )

        assert "ssl" not in kwargs
        assert "database" not in kwargs
        assert kwargs["port"] == 3307

    def test_connect_calls_module(self):
        driver = PyMySQLDriver()
        driver.module = MagicMock()

        connection = driver.connect(
            "dbapi:mysql://db.example.com/app", {"user": "app", "password": "token"}
        )

        assert connection is driver.module.connect.return_value
        driver.module.connect.assert_called_once_with(
            host="db.example.com", port=3306, user="app", password="token", database="app"
        )

    def test_versions_and_compliance(self):
        driver = PyMySQLDriver()

        assert driver.major_version() == pymysql.VERSION[0]
        assert driver.minor_version() == pymysql.VERSION[1]
        assert driver.compliant() is True
        assert driver.parent_logger() is logging.getLogger("pymysql")

    def test_property_info(self):
        info = PyMySQLDriver().property_info("dbapi:mysql://db.example.com/app", {"user": "app"})
        by_name = {item.name: item for item in info}

        assert by_name["user"].value == "app"
        assert by_name["user"].required
        assert by_name["host"].value == "db.example.com"
        assert by_name["port"].value == "3306"
        assert by_name["password"].value is None


class TestMariaDBDriver:
    @patch("iam_dbauth.delegates.dbapi.importlib.import_module")
    def test_connect_kwargs(self, mock_import):
        driver = MariaDBDriver()
        parsed = describe("dbapi:mariadb://db.example.com/app")

        kwargs = driver.connect_kwargs(
            parsed,
            {
                "user": "app",
                "password": "token",
                "ssl": "true",
                "ssl_ca": "/certs/rds.pem",
                "tls_versions": "TLSv1.2,TLSv1.3",
            },
        )

        mock_import.assert_called_once_with("mariadb")
        assert kwargs == {
            "host": "db.example.com",
            "port": 3306,
            "user": "app",
            "password": "token",
            "database": "app",
            "ssl": True,
            "ssl_ca": "/certs/rds.pem",
            "tls_version": "TLSv1.2,TLSv1.3",
            "ssl_verify_cert": True,
        }

    @patch("iam_dbauth.delegates.dbapi.importlib.import_module")
    def test_accepts_only_mariadb(self, mock_import):
        driver = MariaDBDriver()

        assert driver.accepts_url("dbapi:mariadb://db.example.com/app")
        assert not driver.accepts_url("dbapi:mysql://db.example.com/app")

    @patch("iam_dbauth.delegates.dbapi.importlib.import_module")
    def test_versions(self, mock_import):
        mock_import.return_value.__version_info__ = (1, 1, 10, "final", 0)
        mock_import.return_value.apilevel = "2.0"
        driver = MariaDBDriver()

        assert driver.major_version() == 1
        assert driver.minor_version() == 1
        assert driver.compliant() is True
