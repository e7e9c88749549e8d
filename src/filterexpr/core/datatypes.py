"""Data types used by literal expressions and comparisons.

Each ``DataType`` knows how to parse a raw value into a typed value and how
to coerce a value into something directly comparable. Parsing is lenient: a
raw string that cannot be parsed is returned unchanged.
"""

import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

GUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
ISO_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class DataType:
    """A named data type with parse and comparable coercions."""

    name: str
    parse: Callable[[Any], Any] | None = None
    comparable: Callable[[Any], Any] = _identity
    is_numeric: bool = False
    is_date: bool = False

    def __repr__(self) -> str:
        return f"DataType({self.name})"


def _parse_int(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except ValueError:
        return value


def _parse_float(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return value


def _parse_decimal(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return value


def _parse_bool(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    return value


def _parse_string(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_datetime(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return value


def _parse_time(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        return value


def _parse_guid(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _comparable_guid(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    return value.lower() if isinstance(value, str) else value


STRING = DataType("String", parse=_parse_string)
INT16 = DataType("Int16", parse=_parse_int, is_numeric=True)
INT32 = DataType("Int32", parse=_parse_int, is_numeric=True)
INT64 = DataType("Int64", parse=_parse_int, is_numeric=True)
BYTE = DataType("Byte", parse=_parse_int, is_numeric=True)
DECIMAL = DataType("Decimal", parse=_parse_decimal, comparable=_parse_decimal, is_numeric=True)
DOUBLE = DataType("Double", parse=_parse_float, is_numeric=True)
SINGLE = DataType("Single", parse=_parse_float, is_numeric=True)
BOOLEAN = DataType("Boolean", parse=_parse_bool)
DATE_TIME = DataType("DateTime", parse=_parse_datetime, comparable=_parse_datetime, is_date=True)
DATE_TIME_OFFSET = DataType(
    "DateTimeOffset", parse=_parse_datetime, comparable=_parse_datetime, is_date=True
)
TIME = DataType("Time", parse=_parse_time, comparable=_parse_time, is_date=True)
GUID = DataType("Guid", parse=_parse_guid, comparable=_comparable_guid)
# Undefined has no parse: literals tagged with it are left exactly as given.
UNDEFINED = DataType("Undefined")

DATA_TYPES: dict[str, DataType] = {
    dt.name.lower(): dt
    for dt in (
        STRING, INT16, INT32, INT64, BYTE, DECIMAL, DOUBLE, SINGLE, BOOLEAN,
        DATE_TIME, DATE_TIME_OFFSET, TIME, GUID, UNDEFINED,
    )
}


def from_name(name: str) -> DataType | None:
    """Look up a data type by its (case-insensitive) name."""
    return DATA_TYPES.get(name.lower())


def infer_data_type(value: Any) -> DataType:
    """Infer the data type of a raw literal value."""
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INT32
    if isinstance(value, float):
        return DOUBLE
    if isinstance(value, Decimal):
        return DECIMAL
    if isinstance(value, (datetime, date)):
        return DATE_TIME
    if isinstance(value, time):
        return TIME
    if isinstance(value, uuid.UUID):
        return GUID
    if isinstance(value, str):
        if GUID_PATTERN.match(value):
            return GUID
        if ISO_DATETIME_PATTERN.match(value):
            return DATE_TIME
        return STRING
    return UNDEFINED


def resolve_data_type(data_type: DataType | str | None) -> DataType | None:
    """Accept a ``DataType``, a data type name, or None.

    Raises:
        ValueError: If a name or object cannot be resolved.
    """
    if data_type is None or isinstance(data_type, DataType):
        return data_type
    if isinstance(data_type, str):
        resolved = from_name(data_type)
        if resolved is not None:
            return resolved
        raise ValueError(f"Unable to resolve a dataType named: {data_type}")
    raise ValueError(f"Not a DataType: {data_type!r}")


def parse_value(value: Any, data_type: DataType) -> Any:
    """Parse ``value`` into ``data_type``; no-op for types without a parser."""
    if value is None or data_type.parse is None:
        return value
    return data_type.parse(value)


def get_comparable_fn(data_type: Any) -> Callable[[Any], Any]:
    """Comparable coercion for ``data_type`` (identity when unknown)."""
    if isinstance(data_type, DataType):
        return data_type.comparable
    return _identity
