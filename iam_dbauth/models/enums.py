"""Enums for the supported database families."""

from enum import Enum


class DatabaseFamily(Enum):
    """Database families the adapter knows defaults for.

    Schemes outside this set need an explicit port and `delegate_driver`.
    """

    MYSQL = "mysql"
    MARIADB = "mariadb"

    @classmethod
    def from_scheme(cls, scheme: str | None) -> "DatabaseFamily | None":
        """Return the family for a descriptor scheme, or None if unsupported."""
        for family in cls:
            if family.value == scheme:
                return family
        return None
