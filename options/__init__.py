"""
PXF Option Handling
===================
Option catalog, level rules, errors and defaults for the PXF foreign-data
wrapper.

Entry points live in their own modules:
    from options.validator import validate_options    # CREATE / ALTER time
    from options.resolver import OptionResolver        # table access time
"""

from options.levels import CatalogLevel, ExecLocation, level_from_string
from options.errors import (
    ErrorKind, OptionError, WrongCatalogLevelError, InvalidOptionNameError,
    InvalidAttributeValueError, InvalidStringFormatError,
    ParameterValueNeededError, ConflictingOptionsError, InvalidPortError,
)
from options.option_catalog import (
    Option, CONNECTOR_OPTIONS, ROW_FORMAT_OPTIONS,
    validate_level, is_row_format_option, legal_option_names,
)
from options.defaults import OptionDefaults, DEFAULTS

__all__ = [
    "CatalogLevel", "ExecLocation", "level_from_string",
    "ErrorKind", "OptionError", "WrongCatalogLevelError", "InvalidOptionNameError",
    "InvalidAttributeValueError", "InvalidStringFormatError",
    "ParameterValueNeededError", "ConflictingOptionsError", "InvalidPortError",
    "Option", "CONNECTOR_OPTIONS", "ROW_FORMAT_OPTIONS",
    "validate_level", "is_row_format_option", "legal_option_names",
    "OptionDefaults", "DEFAULTS",
]
