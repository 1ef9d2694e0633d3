"""
Option Validator
================
DDL-time validation of one catalog level's option list.

Invoked for CREATE/ALTER of a foreign-data wrapper, server, user mapping,
foreign table or foreign table column. Walks the list once:

  1. Reject options declared at the wrong level.
  2. Check PXF's own options (wire_format, reject_limit, ...).
  3. Collect COPY-style options and hand them to the row-format delegate.

The first problem found raises; nothing is modified.
"""

import logging
from typing import List, Optional

from options.errors import (
    InvalidAttributeValueError,
    InvalidStringFormatError,
    ParameterValueNeededError,
)
from options.levels import CatalogLevel
from options.option_catalog import (
    BINARY_WIRE_FORMAT,
    COPY_FORMATS,
    FORMAT,
    PROTOCOL,
    REJECT_LIMIT,
    REJECT_LIMIT_PERCENT,
    REJECT_LIMIT_ROWS,
    REJECT_LIMIT_TYPE,
    RESOURCE,
    TEXT_WIRE_FORMAT,
    WIRE_FORMAT,
    Option,
    RawOptions,
    as_options,
    is_row_format_option,
    parse_integer,
    validate_level,
)
from rowformat.copy_options import RowFormatValidator

logger = logging.getLogger(__name__)

UNSET_REJECT_LIMIT = -1


# ─── Value checks (shared with the resolver) ────────────────────────────────

def check_wire_format(value: str) -> str:
    if value not in (TEXT_WIRE_FORMAT, BINARY_WIRE_FORMAT):
        raise InvalidAttributeValueError(
            f"invalid wire_format value, only '{TEXT_WIRE_FORMAT}' and "
            f"'{BINARY_WIRE_FORMAT}' are supported"
        )
    return value


def is_copy_format(value: str) -> bool:
    """
    PXF's format names the file format on the external system (parquet,
    avro, text, csv, ...). Only text and csv mean anything to COPY.
    """
    return value.lower() in COPY_FORMATS


def parse_reject_limit(value: str) -> int:
    limit = parse_integer(value)
    if limit is None or limit < 1:
        raise InvalidStringFormatError(
            f"invalid reject_limit value '{value}', should be a positive integer"
        )
    return limit


def check_reject_limit_type(value: str) -> str:
    if value.lower() not in (REJECT_LIMIT_ROWS, REJECT_LIMIT_PERCENT):
        raise InvalidStringFormatError(
            f"invalid reject_limit_type value, only '{REJECT_LIMIT_ROWS}' and "
            f"'{REJECT_LIMIT_PERCENT}' are supported"
        )
    return value


def check_reject_limit_range(limit: int, limit_type: str) -> None:
    """ROWS limits must be 2 or larger; PERCENT limits 1 to 100."""
    if limit_type.lower() == REJECT_LIMIT_ROWS:
        if limit < 2:
            raise InvalidStringFormatError(
                f"invalid (ROWS) reject_limit value '{limit}', "
                f"valid values are 2 or larger"
            )
    elif limit < 1 or limit > 100:
        raise InvalidStringFormatError(
            f"invalid (PERCENT) reject_limit value '{limit}', "
            f"valid values are 1 to 100"
        )


# ─── Validator ──────────────────────────────────────────────────────────────

class OptionValidator:
    """
    Validates option lists for one catalog level at a time.

    `delegate` receives the collected row-format options and the level;
    it must expose validate(options, level) and raise on failure.
    """

    def __init__(self, delegate=None):
        self.delegate = delegate if delegate is not None else RowFormatValidator()

    def validate(self, raw: RawOptions, level: CatalogLevel) -> None:
        options = as_options(raw, level)
        protocol: Optional[str] = None
        resource: Optional[str] = None
        reject_limit = UNSET_REJECT_LIMIT
        reject_limit_type = REJECT_LIMIT_ROWS
        copy_options: List[Option] = []

        for opt in options:
            validate_level(opt.name, level)

            if opt.name == PROTOCOL:
                protocol = opt.value
            elif opt.name == RESOURCE:
                resource = opt.value
            elif opt.name == WIRE_FORMAT:
                check_wire_format(opt.value)
            elif opt.name == FORMAT:
                if is_copy_format(opt.value):
                    copy_options.append(opt)
            elif opt.name == REJECT_LIMIT:
                reject_limit = parse_reject_limit(opt.value)
            elif opt.name == REJECT_LIMIT_TYPE:
                reject_limit_type = check_reject_limit_type(opt.value)
            elif is_row_format_option(opt.name):
                copy_options.append(opt)

        if level is CatalogLevel.WRAPPER and not protocol:
            raise ParameterValueNeededError(
                "the protocol option must be defined for PXF foreign-data wrappers"
            )

        if level is CatalogLevel.FOREIGN_TABLE and not resource:
            raise ParameterValueNeededError(
                "the resource option must be defined at the foreign table level"
            )

        if reject_limit != UNSET_REJECT_LIMIT:
            check_reject_limit_range(reject_limit, reject_limit_type)

        self.delegate.validate(copy_options, level)

        logger.debug("validated %d option(s) at %s (%d forwarded to row-format)",
                     len(options), level.relation_name, len(copy_options))


_default_validator = OptionValidator()


def validate_options(raw: RawOptions, level: CatalogLevel, delegate=None) -> None:
    """Validate one level's options with the default (or given) delegate."""
    validator = _default_validator if delegate is None else OptionValidator(delegate)
    validator.validate(raw, level)
