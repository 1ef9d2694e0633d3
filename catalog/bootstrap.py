"""
Catalog Bootstrap
=================
Initializes a foreign catalog with the standard PXF foreign-data wrappers,
one per external system protocol. Each runs on all segments.
"""

import logging
from pathlib import Path
from typing import Optional

from catalog.system_catalog import ForeignCatalog, MPP_EXECUTE
from options.option_catalog import PROTOCOL

logger = logging.getLogger(__name__)

PXF_PROTOCOLS = (
    "jdbc", "hdfs", "hive", "hbase", "s3", "gs", "adl", "abfss", "wasbs", "file",
)


def wrapper_name(protocol: str) -> str:
    return f"{protocol}_pxf_fdw"


def bootstrap_catalog(data_root: Optional[str]) -> ForeignCatalog:
    """
    Ensure the catalog exists and holds every standard wrapper.
    Existing wrappers are left as they are; running twice is a no-op.
    """
    if data_root is not None:
        Path(data_root).mkdir(parents=True, exist_ok=True)

    catalog = ForeignCatalog(data_root)

    for protocol in PXF_PROTOCOLS:
        name = wrapper_name(protocol)
        if catalog.get_wrapper_by_name(name):
            continue
        logger.info("[Bootstrap] Creating foreign-data wrapper '%s'...", name)
        catalog.create_wrapper(name, [(PROTOCOL, protocol), (MPP_EXECUTE, "all segments")])

    return catalog
