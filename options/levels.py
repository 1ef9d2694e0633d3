"""
Catalog Levels
==============
The scopes at which a PXF option may be declared.

Each level corresponds to one system catalog relation; error messages name
the relation (e.g. "pg_foreign_table") the same way the server does.
"""

from enum import Enum


class CatalogLevel(Enum):
    """Catalog scope an option list belongs to."""
    WRAPPER = "pg_foreign_data_wrapper"
    SERVER = "pg_foreign_server"
    USER_MAPPING = "pg_user_mapping"
    FOREIGN_TABLE = "pg_foreign_table"
    COLUMN = "pg_attribute"

    @property
    def relation_name(self) -> str:
        return self.value


class ExecLocation(Enum):
    """Where scans of a foreign object run (the mpp_execute option)."""
    ANY = "any"
    COORDINATOR = "coordinator"
    ALL_SEGMENTS = "all segments"

    @classmethod
    def parse(cls, text: str) -> "ExecLocation":
        key = text.strip().lower()
        if key == "master":
            return cls.COORDINATOR
        for loc in cls:
            if loc.value == key:
                return loc
        raise ValueError(
            f'"{text}" is not a valid mpp_execute value; '
            f'use "any", "coordinator" or "all segments"'
        )


_ALIASES = {
    "wrapper": CatalogLevel.WRAPPER,
    "fdw": CatalogLevel.WRAPPER,
    "foreign_data_wrapper": CatalogLevel.WRAPPER,
    "server": CatalogLevel.SERVER,
    "user_mapping": CatalogLevel.USER_MAPPING,
    "user": CatalogLevel.USER_MAPPING,
    "foreign_table": CatalogLevel.FOREIGN_TABLE,
    "table": CatalogLevel.FOREIGN_TABLE,
    "column": CatalogLevel.COLUMN,
    "attribute": CatalogLevel.COLUMN,
}


def level_from_string(text: str) -> CatalogLevel:
    """
    Parse a level name as typed by a user ("table", "user_mapping",
    "pg_foreign_server", ...). Raises ValueError for unknown names.
    """
    key = text.strip().lower().replace("-", "_").replace(" ", "_")
    if key in _ALIASES:
        return _ALIASES[key]
    for level in CatalogLevel:
        if level.value == key or level.name.lower() == key:
            return level
    raise ValueError(f"Unknown catalog level: '{text}'")
