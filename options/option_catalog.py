"""
Option Catalog
==============
Static tables describing which PXF options exist and where they may appear.

Two separate namespaces:
  - CONNECTOR_OPTIONS: options interpreted by PXF itself. Each is legal at
    exactly one catalog level.
  - ROW_FORMAT_OPTIONS: COPY-style options forwarded to the row-format
    validator, each with the set of levels it is legal at there.

The same literal name may appear in both (e.g. "format").
Adding an option is a one-line change to one of the tables.
"""

import re
from types import MappingProxyType
from typing import Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from options.errors import WrongCatalogLevelError
from options.levels import CatalogLevel


# ─── Option names ───────────────────────────────────────────────────────────

PROTOCOL = "protocol"
RESOURCE = "resource"
FORMAT = "format"
WIRE_FORMAT = "wire_format"
REJECT_LIMIT = "reject_limit"
REJECT_LIMIT_TYPE = "reject_limit_type"  # rows | percent
PXF_HOST = "pxf_host"
PXF_PORT = "pxf_port"
PXF_PROTOCOL = "pxf_protocol"

FORCE_NOT_NULL = "force_not_null"
FORCE_NULL = "force_null"

# ─── Option values ──────────────────────────────────────────────────────────

FORMAT_TEXT = "text"
FORMAT_CSV = "csv"
FORMAT_RC = "rc"

REJECT_LIMIT_ROWS = "rows"
REJECT_LIMIT_PERCENT = "percent"

# Wire encodings understood by the PXF service
TEXT_WIRE_FORMAT = "TEXT"
BINARY_WIRE_FORMAT = "GPDBWritable"

# Formats that travel as delimited text; "text:multi" is multi-line text
ROW_BASED_FORMATS = frozenset({FORMAT_TEXT, "text:multi", FORMAT_CSV, FORMAT_RC})

# Formats the COPY machinery itself can parse
COPY_FORMATS = frozenset({FORMAT_TEXT, FORMAT_CSV})


# ─── Catalog tables ─────────────────────────────────────────────────────────

CONNECTOR_OPTIONS: Mapping[str, CatalogLevel] = MappingProxyType({
    PROTOCOL: CatalogLevel.WRAPPER,
    RESOURCE: CatalogLevel.FOREIGN_TABLE,
    FORMAT: CatalogLevel.FOREIGN_TABLE,
    WIRE_FORMAT: CatalogLevel.FOREIGN_TABLE,

    # Error handling
    REJECT_LIMIT: CatalogLevel.FOREIGN_TABLE,
    REJECT_LIMIT_TYPE: CatalogLevel.FOREIGN_TABLE,
})

_TABLE = frozenset({CatalogLevel.FOREIGN_TABLE})
_COLUMN = frozenset({CatalogLevel.COLUMN})

# force_not_null and force_null are per-column booleans, not table options.
# oids, freeze and force_quote are not supported.
ROW_FORMAT_OPTIONS: Mapping[str, frozenset] = MappingProxyType({
    FORMAT: _TABLE,
    "header": _TABLE,
    "delimiter": _TABLE,
    "quote": _TABLE,
    "escape": _TABLE,
    "null": _TABLE,
    "encoding": _TABLE,
    "newline": _TABLE,
    "fill_missing_fields": _TABLE,
    FORCE_NOT_NULL: _COLUMN,
    FORCE_NULL: _COLUMN,
})


# ─── Options ────────────────────────────────────────────────────────────────

class Option(NamedTuple):
    """One declared option. level is None until bound to a catalog level."""
    name: str
    value: str
    level: Optional[CatalogLevel] = None


RawOptions = Union[Mapping[str, str], Iterable[Union[Option, Tuple[str, str]]]]


def as_options(raw: RawOptions, level: Optional[CatalogLevel] = None) -> List[Option]:
    """
    Normalize a raw option list into Options bound to `level`.
    Accepts a mapping, (name, value) pairs, or Option instances.
    Order is preserved.
    """
    if raw is None:
        return []
    items = raw.items() if isinstance(raw, Mapping) else raw
    result = []
    for item in items:
        if isinstance(item, Option):
            result.append(item if level is None else item._replace(level=level))
        else:
            name, value = item
            result.append(Option(name, value, level))
    return result


# ASCII decimal only: no underscores, no other Unicode digits
_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")
_LEADING_INTEGER = re.compile(r"\s*[+-]?[0-9]+")


def parse_integer(value: str) -> Optional[int]:
    """Integer value of an option, or None if it is not a plain decimal."""
    if value is None or not _INTEGER.fullmatch(value):
        return None
    return int(value)


def leading_integer(value: str) -> int:
    """atoi(): the leading decimal digits of value, 0 if there are none."""
    match = _LEADING_INTEGER.match(value or "")
    return int(match.group()) if match else 0


# ─── Lookups ────────────────────────────────────────────────────────────────

def validate_level(option: str, level: CatalogLevel) -> None:
    """
    Raise WrongCatalogLevelError if `option` is a connector option that is
    legal somewhere other than `level`. Unknown names pass through.
    """
    legal = CONNECTOR_OPTIONS.get(option)
    if legal is not None and legal is not level:
        raise WrongCatalogLevelError(option, legal)


def is_row_format_option(option: str) -> bool:
    """True if `option` belongs to the row-format namespace at any level."""
    return option in ROW_FORMAT_OPTIONS


def is_valid_row_format_option(option: str, level: CatalogLevel) -> bool:
    return level in ROW_FORMAT_OPTIONS.get(option, ())


def legal_option_names(level: CatalogLevel) -> Tuple[str, ...]:
    """Sorted row-format option names legal at `level`."""
    return tuple(sorted(
        name for name, levels in ROW_FORMAT_OPTIONS.items() if level in levels
    ))


def format_valid_options_hint(level: CatalogLevel) -> str:
    names = legal_option_names(level)
    if not names:
        return "There are no valid options in this context."
    return f"Valid options in this context are: {', '.join(names)}"
