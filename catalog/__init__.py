# PXF Catalog Package
# ===================
# Stores wrappers, servers, user mappings and foreign tables with their options.

from catalog.errors import CatalogError, ObjectNotFoundError, DependentObjectsError
from catalog.system_catalog import (
    ForeignCatalog, WrapperInfo, ServerInfo, UserMappingInfo, ForeignTableInfo,
)
from catalog.resolver import CatalogResolver, ForeignTableChain
from catalog.bootstrap import bootstrap_catalog
