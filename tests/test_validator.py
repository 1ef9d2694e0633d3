import pytest

from options.errors import (
    ConflictingOptionsError,
    ErrorKind,
    InvalidAttributeValueError,
    InvalidOptionNameError,
    InvalidStringFormatError,
    ParameterValueNeededError,
    WrongCatalogLevelError,
)
from options.levels import CatalogLevel
from options.validator import OptionValidator, validate_options

TABLE = CatalogLevel.FOREIGN_TABLE
RESOURCE = ("resource", "/data/sales")


class RecordingDelegate:
    """Row-format delegate stand-in that records what it was handed."""

    def __init__(self):
        self.calls = []

    def validate(self, options, level):
        self.calls.append(([(o.name, o.value) for o in options], level))


@pytest.fixture
def delegate():
    return RecordingDelegate()


# ─── Required fields ────────────────────────────────────────────────────────

def test_wrapper_requires_protocol():
    with pytest.raises(ParameterValueNeededError) as exc:
        validate_options([], CatalogLevel.WRAPPER)
    assert exc.value.kind is ErrorKind.DYNAMIC_PARAMETER_VALUE_NEEDED
    assert exc.value.sqlstate == "HV002"


def test_wrapper_rejects_empty_protocol():
    with pytest.raises(ParameterValueNeededError):
        validate_options([("protocol", "")], CatalogLevel.WRAPPER)


def test_wrapper_with_protocol():
    validate_options([("protocol", "s3")], CatalogLevel.WRAPPER)


def test_table_requires_resource():
    with pytest.raises(ParameterValueNeededError, match="resource option must be defined"):
        validate_options([("format", "csv")], TABLE)


def test_table_with_resource():
    validate_options([RESOURCE], TABLE)


def test_server_and_user_mapping_need_nothing():
    validate_options([], CatalogLevel.SERVER)
    validate_options([], CatalogLevel.USER_MAPPING)
    validate_options({"accesskey": "AK", "secretkey": "SK"}, CatalogLevel.USER_MAPPING)


# ─── Level checks ───────────────────────────────────────────────────────────

def test_resource_at_server_level():
    with pytest.raises(WrongCatalogLevelError):
        validate_options([("resource", "/x")], CatalogLevel.SERVER)


def test_protocol_at_user_mapping_level():
    with pytest.raises(WrongCatalogLevelError, match="pg_foreign_data_wrapper"):
        validate_options([("protocol", "s3")], CatalogLevel.USER_MAPPING)


def test_first_error_wins():
    with pytest.raises(InvalidAttributeValueError):
        validate_options([RESOURCE, ("wire_format", "bad"), ("reject_limit", "0")], TABLE)


def test_level_error_before_missing_protocol():
    with pytest.raises(WrongCatalogLevelError):
        validate_options([("format", "csv")], CatalogLevel.WRAPPER)


# ─── wire_format ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("value", ["TEXT", "GPDBWritable"])
def test_wire_format_valid(value):
    validate_options([RESOURCE, ("wire_format", value)], TABLE)


@pytest.mark.parametrize("value", ["text", "binary", ""])
def test_wire_format_invalid(value):
    with pytest.raises(InvalidAttributeValueError) as exc:
        validate_options([RESOURCE, ("wire_format", value)], TABLE)
    assert "only 'TEXT' and 'GPDBWritable' are supported" in str(exc.value)
    assert exc.value.sqlstate == "HV024"


# ─── reject_limit ───────────────────────────────────────────────────────────

@pytest.mark.parametrize("limit,limit_type", [
    ("2", "rows"), ("5000", "ROWS"), ("1", "percent"), ("100", "percent"), ("50", "Percent"),
])
def test_reject_limit_in_range(limit, limit_type):
    validate_options([RESOURCE, ("reject_limit", limit), ("reject_limit_type", limit_type)], TABLE)


@pytest.mark.parametrize("limit,limit_type", [
    ("1", "rows"), ("0", "percent"), ("101", "percent"), ("-3", "rows"),
])
def test_reject_limit_out_of_range(limit, limit_type):
    with pytest.raises(InvalidStringFormatError) as exc:
        validate_options([RESOURCE, ("reject_limit", limit), ("reject_limit_type", limit_type)], TABLE)
    assert exc.value.kind is ErrorKind.INVALID_STRING_FORMAT


def test_reject_limit_defaults_to_rows():
    with pytest.raises(InvalidStringFormatError, match=r"\(ROWS\)"):
        validate_options([RESOURCE, ("reject_limit", "1")], TABLE)
    validate_options([RESOURCE, ("reject_limit", "2")], TABLE)


def test_reject_limit_type_after_limit():
    validate_options([RESOURCE, ("reject_limit_type", "percent"), ("reject_limit", "100")], TABLE)
    with pytest.raises(InvalidStringFormatError, match=r"\(PERCENT\)"):
        validate_options([RESOURCE, ("reject_limit", "101"), ("reject_limit_type", "percent")], TABLE)


@pytest.mark.parametrize("value", ["abc", "", "1.5", "1_000", "５", "12abc"])
def test_reject_limit_not_integer(value):
    with pytest.raises(InvalidStringFormatError, match="should be a positive integer"):
        validate_options([RESOURCE, ("reject_limit", value)], TABLE)


def test_reject_limit_type_invalid():
    with pytest.raises(InvalidStringFormatError, match="'rows' and 'percent'"):
        validate_options([RESOURCE, ("reject_limit_type", "lines")], TABLE)


def test_reject_limit_type_alone_is_fine():
    validate_options([RESOURCE, ("reject_limit_type", "percent")], TABLE)


# ─── Forwarding to the row-format delegate ──────────────────────────────────

@pytest.mark.parametrize("fmt", ["csv", "CSV", "text", "Text"])
def test_copy_formats_are_forwarded(delegate, fmt):
    validate_options([RESOURCE, ("format", fmt)], TABLE, delegate=delegate)
    assert delegate.calls == [([("format", fmt)], TABLE)]


@pytest.mark.parametrize("fmt", ["parquet", "avro", "json", "rc"])
def test_other_formats_are_not_forwarded(delegate, fmt):
    validate_options([RESOURCE, ("format", fmt)], TABLE, delegate=delegate)
    assert delegate.calls == [([], TABLE)]


def test_row_format_options_forwarded_in_order(delegate):
    validate_options([
        ("delimiter", "|"), RESOURCE, ("header", "true"), ("accesskey", "x"), ("format", "csv"),
    ], TABLE, delegate=delegate)
    forwarded, level = delegate.calls[0]
    assert forwarded == [("delimiter", "|"), ("header", "true"), ("format", "csv")]
    assert level is TABLE


def test_unknown_options_are_ignored(delegate):
    validate_options([("config", "default"), ("pxf_port", "not-a-port")],
                     CatalogLevel.SERVER, delegate=delegate)
    assert delegate.calls == [([], CatalogLevel.SERVER)]


def test_delegate_not_called_after_failure(delegate):
    with pytest.raises(ParameterValueNeededError):
        validate_options([("delimiter", "|")], TABLE, delegate=delegate)
    assert delegate.calls == []


def test_delegate_errors_propagate():
    class Failing:
        def validate(self, options, level):
            raise InvalidOptionNameError("whatever")

    with pytest.raises(InvalidOptionNameError):
        OptionValidator(Failing()).validate([RESOURCE], TABLE)


# ─── With the COPY delegate ─────────────────────────────────────────────────

def test_row_format_option_at_server_level():
    with pytest.raises(InvalidOptionNameError) as exc:
        validate_options([("delimiter", ",")], CatalogLevel.SERVER)
    assert exc.value.hint == "There are no valid options in this context."
    assert exc.value.kind is ErrorKind.INVALID_OPTION_NAME


def test_column_flag_at_table_level():
    with pytest.raises(InvalidOptionNameError) as exc:
        validate_options([RESOURCE, ("force_not_null", "true")], TABLE)
    assert exc.value.hint.startswith("Valid options in this context are: delimiter, encoding")


def test_csv_table():
    validate_options([
        RESOURCE, ("format", "csv"), ("delimiter", "|"), ("header", "true"),
        ("quote", "'"), ("null", ""), ("encoding", "UTF8"), ("newline", "lf"),
    ], TABLE)


def test_text_table_bad_delimiter():
    with pytest.raises(InvalidAttributeValueError, match='delimiter cannot be "a"'):
        validate_options([RESOURCE, ("format", "text"), ("delimiter", "a")], TABLE)


def test_non_copy_format_skips_copy_rules():
    # quote is CSV-only but format parquet means COPY sees text defaults
    with pytest.raises(InvalidAttributeValueError, match="only in CSV mode"):
        validate_options([RESOURCE, ("format", "parquet"), ("quote", "'")], TABLE)


def test_column_flags():
    validate_options([("force_not_null", "true"), ("force_null", "false")], CatalogLevel.COLUMN)


def test_duplicate_column_flag():
    with pytest.raises(ConflictingOptionsError) as exc:
        validate_options([("force_not_null", "true"), ("force_not_null", "on")], CatalogLevel.COLUMN)
    assert exc.value.kind is ErrorKind.SYNTAX_ERROR
    assert exc.value.sqlstate == "42601"
    assert str(exc.value).startswith("conflicting or redundant options")
    assert 'option "force_not_null" supplied more than once' in exc.value.hint


def test_connector_option_at_column_level():
    with pytest.raises(WrongCatalogLevelError):
        validate_options([("resource", "/x")], CatalogLevel.COLUMN)
