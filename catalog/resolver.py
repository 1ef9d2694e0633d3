"""
Foreign Table Resolution
========================
Resolves a foreign table name to the chain of catalog objects its options
come from, then to its merged PXF options.

Lookup order follows the dependencies between objects:
    table -> server (table.server_oid)
          -> user mapping (user, server.oid; falls back to PUBLIC)
          -> wrapper (server.wrapper_oid)
"""

from dataclasses import dataclass

from catalog.errors import ObjectNotFoundError
from catalog.system_catalog import (
    ForeignCatalog, ForeignTableInfo, ServerInfo, UserMappingInfo, WrapperInfo,
)
from options.defaults import DEFAULTS, OptionDefaults
from options.resolver import OptionResolver, PxfOptions


@dataclass(frozen=True)
class ForeignTableChain:
    table: ForeignTableInfo
    server: ServerInfo
    user_mapping: UserMappingInfo
    wrapper: WrapperInfo


class CatalogResolver:
    def __init__(self, catalog: ForeignCatalog, defaults: OptionDefaults = DEFAULTS):
        self.catalog = catalog
        self.options = OptionResolver(catalog, defaults)

    def _get_table(self, name: str) -> ForeignTableInfo:
        table = self.catalog.get_foreign_table_by_name(name)
        if not table:
            raise ObjectNotFoundError(name, "Foreign table")
        return table

    def resolve_foreign_table(self, name: str, user: str) -> ForeignTableChain:
        """
        Resolve a table name to (table, server, user mapping, wrapper).
        """
        table = self._get_table(name)
        server = self.catalog.get_server(table.server_oid)
        mapping = self.catalog.get_user_mapping(user, server.oid)
        wrapper = self.catalog.get_wrapper(server.wrapper_oid)
        return ForeignTableChain(table, server, mapping, wrapper)

    def resolve_options(self, name: str, user: str) -> PxfOptions:
        """Merged options for one access of table `name` by `user`."""
        return self.options.resolve(self._get_table(name).oid, user)
