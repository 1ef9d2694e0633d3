"""
Option Errors
=============
Every option failure carries a machine-checkable kind, the SQLSTATE the
server would report, a message and an optional hint.

Propagation is fail-fast: the first error raised aborts the statement or
access that triggered validation/resolution.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Error taxonomy."""
    WRONG_CATALOG_LEVEL = "wrong_catalog_level"
    INVALID_OPTION_NAME = "invalid_option_name"
    INVALID_ATTRIBUTE_VALUE = "invalid_attribute_value"
    INVALID_STRING_FORMAT = "invalid_string_format"
    DYNAMIC_PARAMETER_VALUE_NEEDED = "dynamic_parameter_value_needed"
    SYNTAX_ERROR = "syntax_error"
    INVALID_PORT = "invalid_port"


# Wrong level and unknown name share HV00D (fdw_invalid_option_name).
SQLSTATES = {
    ErrorKind.WRONG_CATALOG_LEVEL: "HV00D",
    ErrorKind.INVALID_OPTION_NAME: "HV00D",
    ErrorKind.INVALID_ATTRIBUTE_VALUE: "HV024",
    ErrorKind.INVALID_STRING_FORMAT: "HV00A",
    ErrorKind.DYNAMIC_PARAMETER_VALUE_NEEDED: "HV002",
    ErrorKind.SYNTAX_ERROR: "42601",
    ErrorKind.INVALID_PORT: "XX000",
}


class OptionError(Exception):
    """Base class for option validation/resolution failures."""
    kind: ErrorKind = None

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    @property
    def sqlstate(self) -> str:
        return SQLSTATES[self.kind]

    def __str__(self):
        if self.hint:
            return f"{self.message}\nHINT:  {self.hint}"
        return self.message


class WrongCatalogLevelError(OptionError):
    kind = ErrorKind.WRONG_CATALOG_LEVEL

    def __init__(self, option: str, legal_level):
        super().__init__(
            f"the {option} option can only be defined at the "
            f"{legal_level.relation_name} level"
        )
        self.option = option
        self.legal_level = legal_level


class InvalidOptionNameError(OptionError):
    kind = ErrorKind.INVALID_OPTION_NAME

    def __init__(self, option: str, hint: Optional[str] = None):
        super().__init__(f'invalid option "{option}"', hint)
        self.option = option


class InvalidAttributeValueError(OptionError):
    kind = ErrorKind.INVALID_ATTRIBUTE_VALUE


class InvalidStringFormatError(OptionError):
    kind = ErrorKind.INVALID_STRING_FORMAT


class ParameterValueNeededError(OptionError):
    kind = ErrorKind.DYNAMIC_PARAMETER_VALUE_NEEDED


class ConflictingOptionsError(OptionError):
    """Option supplied more than once where only one is allowed."""
    kind = ErrorKind.SYNTAX_ERROR

    def __init__(self, hint: Optional[str] = None):
        super().__init__("conflicting or redundant options", hint)


class InvalidPortError(OptionError):
    kind = ErrorKind.INVALID_PORT

    def __init__(self, value: str):
        super().__init__(f"invalid port number: {value}")
        self.value = value
