"""
Row-Format (COPY) Option Validation
===================================
Validates the COPY-style options PXF forwards for a catalog level.

Two stages:
  1. RowFormatValidator.validate(): every name must be legal at the level;
     force_not_null / force_null may each appear once and must be booleans.
  2. process_copy_options(): the COPY rules proper (format, delimiter,
     quote, escape, null, header, encoding, newline, fill_missing_fields)
     and the cross-option checks between them.

All failures raise OptionError subclasses; nothing is retained.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from options.errors import (
    ConflictingOptionsError,
    InvalidAttributeValueError,
    InvalidOptionNameError,
)
from options.levels import CatalogLevel
from options.option_catalog import (
    FORCE_NOT_NULL,
    FORCE_NULL,
    FORMAT,
    FORMAT_CSV,
    FORMAT_TEXT,
    Option,
    RawOptions,
    as_options,
    format_valid_options_hint,
    is_valid_row_format_option,
)
from rowformat.encodings import canonical_encoding

logger = logging.getLogger(__name__)

# Characters a text-mode delimiter may not be: they would be ambiguous with
# backslash escapes and data
TEXT_DELIMITER_FORBIDDEN = "\\.abcdefghijklmnopqrstuvwxyz0123456789"

NEWLINES = ("LF", "CR", "CRLF")

_BOOLEANS = {"true": True, "on": True, "false": False, "off": False}


def bool_value(value: Optional[str]) -> Optional[bool]:
    """Boolean meaning of an option value, or None if it has none."""
    if value is None:
        return True
    return _BOOLEANS.get(value.lower())


def parse_bool(name: str, value: Optional[str]) -> bool:
    """
    Parse a boolean option value. A missing value means true; otherwise only
    true/false/on/off (any case) are accepted.
    """
    result = bool_value(value)
    if result is None:
        raise InvalidAttributeValueError(f"{name} requires a Boolean value")
    return result


def _single_byte(value: str) -> bool:
    return len(value.encode("utf-8")) == 1


@dataclass
class CopyFormat:
    """Effective COPY settings after defaults are applied."""
    csv_mode: bool = False
    header: bool = False
    delimiter: Optional[str] = None
    null_print: Optional[str] = None
    quote: Optional[str] = None
    escape: Optional[str] = None
    encoding: Optional[str] = None
    newline: Optional[str] = None
    fill_missing_fields: bool = False


def process_copy_options(raw: RawOptions) -> CopyFormat:
    """Apply COPY's own rules to table-level row-format options."""
    state = CopyFormat()
    seen = set()

    for opt in as_options(raw):
        if opt.name in seen:
            raise ConflictingOptionsError()
        seen.add(opt.name)

        if opt.name == FORMAT:
            fmt = opt.value.lower()
            if fmt == FORMAT_TEXT:
                state.csv_mode = False
            elif fmt == FORMAT_CSV:
                state.csv_mode = True
            else:
                raise InvalidAttributeValueError(f'COPY format "{opt.value}" not recognized')
        elif opt.name == "header":
            state.header = parse_bool(opt.name, opt.value)
        elif opt.name == "delimiter":
            state.delimiter = opt.value
        elif opt.name == "null":
            state.null_print = opt.value
        elif opt.name == "quote":
            state.quote = opt.value
        elif opt.name == "escape":
            state.escape = opt.value
        elif opt.name == "encoding":
            state.encoding = canonical_encoding(opt.value)
            if state.encoding is None:
                raise InvalidAttributeValueError(
                    'argument to option "encoding" must be a valid encoding name'
                )
        elif opt.name == "newline":
            state.newline = opt.value.upper()
            if state.newline not in NEWLINES:
                raise InvalidAttributeValueError(
                    f'invalid value for NEWLINE "{opt.value}"',
                    hint="Valid options are: 'LF', 'CRLF' and 'CR'.",
                )
        elif opt.name == "fill_missing_fields":
            state.fill_missing_fields = parse_bool(opt.name, opt.value)
        else:
            raise InvalidOptionNameError(opt.name)

    _apply_defaults(state, quote_given="quote" in seen, escape_given="escape" in seen)
    _check_copy_format(state)
    return state


def _apply_defaults(state: CopyFormat, quote_given: bool, escape_given: bool) -> None:
    if state.delimiter is None:
        state.delimiter = "," if state.csv_mode else "\t"
    if state.null_print is None:
        state.null_print = "" if state.csv_mode else "\\N"

    if not state.csv_mode:
        if state.header:
            raise InvalidAttributeValueError("COPY HEADER available only in CSV mode")
        if quote_given:
            raise InvalidAttributeValueError("COPY quote available only in CSV mode")
        if escape_given:
            raise InvalidAttributeValueError("COPY escape available only in CSV mode")
        return

    if state.quote is None:
        state.quote = '"'
    if state.escape is None:
        state.escape = state.quote


def _check_copy_format(state: CopyFormat) -> None:
    delim = state.delimiter
    if not _single_byte(delim):
        raise InvalidAttributeValueError("COPY delimiter must be a single one-byte character")

    if delim in ("\r", "\n"):
        raise InvalidAttributeValueError("COPY delimiter cannot be newline or carriage return")

    if "\r" in state.null_print or "\n" in state.null_print:
        raise InvalidAttributeValueError(
            "COPY null representation cannot use newline or carriage return"
        )

    if not state.csv_mode and delim in TEXT_DELIMITER_FORBIDDEN:
        raise InvalidAttributeValueError(f'COPY delimiter cannot be "{delim}"')

    if state.csv_mode:
        if not _single_byte(state.quote):
            raise InvalidAttributeValueError("COPY quote must be a single one-byte character")
        if delim == state.quote:
            raise InvalidAttributeValueError("COPY delimiter and quote must be different")
        if not _single_byte(state.escape):
            raise InvalidAttributeValueError("COPY escape must be a single one-byte character")

    if delim in state.null_print:
        raise InvalidAttributeValueError(
            "COPY delimiter must not appear in the NULL specification"
        )

    if state.csv_mode and state.quote in state.null_print:
        raise InvalidAttributeValueError(
            "CSV quote character must not appear in the NULL specification"
        )


class RowFormatValidator:
    """Row-format delegate: validate(options, level) raises on failure."""

    def validate(self, raw: RawOptions, level: CatalogLevel) -> None:
        force_not_null: Optional[Option] = None
        force_null: Optional[Option] = None
        copy_options: List[Option] = []

        for opt in as_options(raw, level):
            if not is_valid_row_format_option(opt.name, level):
                raise InvalidOptionNameError(opt.name, format_valid_options_hint(level))

            # The per-column flags are only checked here; the resolver reads
            # them back from the column options.
            if opt.name == FORCE_NOT_NULL:
                if force_not_null is not None:
                    raise ConflictingOptionsError(
                        'option "force_not_null" supplied more than once for a column'
                    )
                force_not_null = opt
                parse_bool(opt.name, opt.value)
            elif opt.name == FORCE_NULL:
                if force_null is not None:
                    raise ConflictingOptionsError(
                        'option "force_null" supplied more than once for a column'
                    )
                force_null = opt
                parse_bool(opt.name, opt.value)
            else:
                copy_options.append(opt)

        process_copy_options(copy_options)
        logger.debug("row-format options valid at %s: %s", level.relation_name,
                     ", ".join(o.name for o in copy_options) or "(none)")
