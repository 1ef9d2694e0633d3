"""
Option Resolver
===============
Access-time merge of a foreign table's options across all catalog levels.

Precedence (first occurrence wins):
    FOREIGN_TABLE > USER_MAPPING > SERVER > WRAPPER

The result is an immutable PxfOptions snapshot owned by the caller. Every
connection field is either resolved from the options or defaulted.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Set, Tuple

from options.defaults import DEFAULTS, OptionDefaults, parse_port
from options.levels import CatalogLevel, ExecLocation
from options.option_catalog import (
    BINARY_WIRE_FORMAT,
    FORCE_NOT_NULL,
    FORCE_NULL,
    FORMAT,
    PROTOCOL,
    PXF_HOST,
    PXF_PORT,
    PXF_PROTOCOL,
    REJECT_LIMIT,
    REJECT_LIMIT_ROWS,
    REJECT_LIMIT_TYPE,
    RESOURCE,
    ROW_BASED_FORMATS,
    TEXT_WIRE_FORMAT,
    WIRE_FORMAT,
    Option,
    RawOptions,
    as_options,
    is_row_format_option,
    leading_integer,
)
from options.validator import UNSET_REJECT_LIMIT, is_copy_format
from rowformat.copy_options import bool_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PxfOptions:
    """Fully merged and defaulted configuration for one table access."""
    protocol: Optional[str]
    resource: Optional[str]
    profile: Optional[str]
    format: Optional[str]
    wire_format: str
    pxf_host: str
    pxf_port: int
    pxf_protocol: str
    reject_limit: int = UNSET_REJECT_LIMIT
    is_reject_limit_rows: bool = True
    server: Optional[str] = None
    exec_location: Optional[ExecLocation] = None
    copy_options: Tuple[Option, ...] = ()
    options: Tuple[Option, ...] = ()
    force_not_null: Tuple[str, ...] = ()
    force_null: Tuple[str, ...] = ()

    @property
    def has_reject_limit(self) -> bool:
        return self.reject_limit != UNSET_REJECT_LIMIT

    def option(self, name: str) -> Optional[str]:
        """Value of a pass-through option, or None."""
        for opt in self.options:
            if opt.name == name:
                return opt.value
        return None


def default_wire_format(format_name: Optional[str]) -> str:
    """Row-based formats travel as TEXT; everything else as GPDBWritable."""
    if format_name and format_name.lower() in ROW_BASED_FORMATS:
        return TEXT_WIRE_FORMAT
    return BINARY_WIRE_FORMAT


def build_profile(protocol: Optional[str], format_name: Optional[str]) -> Optional[str]:
    """profile = protocol[:format]"""
    if format_name:
        return f"{protocol or ''}:{format_name}"
    return protocol


def _column_flags(column_options: Optional[Mapping[str, RawOptions]]) -> Tuple[List[str], List[str]]:
    force_not_null: List[str] = []
    force_null: List[str] = []
    for column, raw in (column_options or {}).items():
        for opt in as_options(raw, CatalogLevel.COLUMN):
            if opt.name == FORCE_NOT_NULL and bool_value(opt.value):
                force_not_null.append(column)
            elif opt.name == FORCE_NULL and bool_value(opt.value):
                force_null.append(column)
    return force_not_null, force_null


def resolve_options(
    table_options: RawOptions,
    user_options: RawOptions = None,
    server_options: RawOptions = None,
    wrapper_options: RawOptions = None,
    *,
    server: Optional[str] = None,
    exec_location: Optional[ExecLocation] = None,
    column_options: Optional[Mapping[str, RawOptions]] = None,
    defaults: OptionDefaults = DEFAULTS,
) -> PxfOptions:
    """
    Merge the four levels' raw option lists into a PxfOptions.

    Values are taken as stored; each list was validated when it was defined.
    pxf_port is the one value checked here, since nothing validates it
    earlier. A malformed port is the only error this raises.
    """
    merged: List[Option] = []
    merged += as_options(table_options, CatalogLevel.FOREIGN_TABLE)
    merged += as_options(user_options, CatalogLevel.USER_MAPPING)
    merged += as_options(server_options, CatalogLevel.SERVER)
    merged += as_options(wrapper_options, CatalogLevel.WRAPPER)

    fields: Dict[str, object] = {}
    copy_options: List[Option] = []
    copy_names: Set[str] = set()
    other_options: List[Option] = []
    other_names: Set[str] = set()

    for opt in merged:
        name = opt.name
        if name == PXF_PORT:
            port = parse_port(opt.value)
            fields.setdefault(name, port)
        elif name in (PXF_HOST, PXF_PROTOCOL, PROTOCOL, RESOURCE, WIRE_FORMAT):
            fields.setdefault(name, opt.value)
        elif name == REJECT_LIMIT:
            fields.setdefault(name, leading_integer(opt.value))
        elif name == REJECT_LIMIT_TYPE:
            fields.setdefault(name, opt.value.lower() == REJECT_LIMIT_ROWS)
        elif name == FORMAT:
            fields.setdefault(name, opt.value)
            if is_copy_format(opt.value) and name not in copy_names:
                copy_options.append(opt)
                copy_names.add(name)
        elif is_row_format_option(name):
            if name not in copy_names:
                copy_options.append(opt)
                copy_names.add(name)
        elif name not in other_names:
            other_options.append(opt)
            other_names.add(name)

    protocol = fields.get(PROTOCOL)
    format_name = fields.get(FORMAT)
    force_not_null, force_null = _column_flags(column_options)

    result = PxfOptions(
        protocol=protocol,
        resource=fields.get(RESOURCE),
        profile=build_profile(protocol, format_name),
        format=format_name,
        wire_format=fields.get(WIRE_FORMAT) or default_wire_format(format_name),
        pxf_host=fields.get(PXF_HOST) or defaults.host,
        pxf_port=fields.get(PXF_PORT) or defaults.port,
        pxf_protocol=fields.get(PXF_PROTOCOL) or defaults.protocol,
        reject_limit=fields.get(REJECT_LIMIT, UNSET_REJECT_LIMIT),
        is_reject_limit_rows=fields.get(REJECT_LIMIT_TYPE, True),
        server=server,
        exec_location=exec_location,
        copy_options=tuple(copy_options),
        options=tuple(other_options),
        force_not_null=tuple(force_not_null),
        force_null=tuple(force_null),
    )
    logger.debug("resolved profile=%s resource=%s via %s://%s:%d",
                 result.profile, result.resource, result.pxf_protocol,
                 result.pxf_host, result.pxf_port)
    return result


class OptionResolver:
    """
    Resolves a foreign table's options against catalog storage.

    The catalog must provide get_foreign_table(oid), get_server(oid),
    get_user_mapping(user, server_oid), get_wrapper(oid),
    get_options(level, oid) and get_column_options(table_oid).
    """

    def __init__(self, catalog, defaults: OptionDefaults = DEFAULTS):
        self.catalog = catalog
        self.defaults = defaults

    def resolve(self, table_oid: int, user: str) -> PxfOptions:
        # Strict dependency order: each lookup uses ids from the previous one.
        table = self.catalog.get_foreign_table(table_oid)
        server = self.catalog.get_server(table.server_oid)
        mapping = self.catalog.get_user_mapping(user, server.oid)
        wrapper = self.catalog.get_wrapper(server.wrapper_oid)

        logger.debug("resolving options for table %s (server=%s, wrapper=%s, user=%s)",
                     table.name, server.name, wrapper.name, mapping.user)

        return resolve_options(
            self.catalog.get_options(CatalogLevel.FOREIGN_TABLE, table.oid),
            self.catalog.get_options(CatalogLevel.USER_MAPPING, mapping.oid),
            self.catalog.get_options(CatalogLevel.SERVER, server.oid),
            self.catalog.get_options(CatalogLevel.WRAPPER, wrapper.oid),
            server=server.name,
            exec_location=wrapper.exec_location,
            column_options=self.catalog.get_column_options(table.oid),
            defaults=self.defaults,
        )
