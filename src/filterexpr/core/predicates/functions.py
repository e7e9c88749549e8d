"""Built-in functions usable inside filter expressions.

The table is fixed: names are lower case, and each entry carries its local
implementation together with its declared return type.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from functools import wraps
from types import MappingProxyType
from typing import Any, Callable

from filterexpr.core import datatypes
from filterexpr.core.datatypes import DataType


@dataclass(frozen=True)
class QueryFunction:
    """A function table entry."""

    name: str
    fn: Callable[..., Any]
    data_type: DataType


def _none_if_missing(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Return None instead of calling ``fn`` when its first argument is None."""

    @wraps(fn)
    def wrapper(source: Any, *args: Any) -> Any:
        if source is None:
            return None
        return fn(source, *args)

    return wrapper


def _as_datetime(value: Any) -> Any:
    parsed = datatypes.parse_value(value, datatypes.DATE_TIME)
    return parsed if isinstance(parsed, datetime) else value


@_none_if_missing
def _toupper(source: Any) -> str:
    return str(source).upper()


@_none_if_missing
def _tolower(source: Any) -> str:
    return str(source).lower()


@_none_if_missing
def _substring(source: Any, start: Any, end: Any = None) -> str:
    # start/end index pair; swapped when reversed and clamped to the string.
    text = str(source)
    start = max(int(start), 0)
    end = len(text) if end is None else max(int(end), 0)
    if start > end:
        start, end = end, start
    return text[start:end]


def _substringof(find: Any, source: Any) -> bool:
    if source is None or find is None:
        return False
    return str(find) in str(source)


@_none_if_missing
def _length(source: Any) -> int:
    return len(source)


@_none_if_missing
def _trim(source: Any) -> str:
    return str(source).strip()


def _concat(first: Any, second: Any) -> str:
    return f"{'' if first is None else first}{'' if second is None else second}"


@_none_if_missing
def _replace(source: Any, find: Any, replacement: Any) -> str:
    return str(source).replace(str(find), str(replacement), 1)


@_none_if_missing
def _startswith(source: Any, find: Any) -> bool:
    return str(source).startswith(str(find))


@_none_if_missing
def _endswith(source: Any, find: Any) -> bool:
    return str(source).endswith(str(find))


@_none_if_missing
def _indexof(source: Any, find: Any) -> int:
    return str(source).find(str(find))


@_none_if_missing
def _round(source: Any) -> int:
    # Half values round up, matching the usual query-language semantics.
    return math.floor(float(source) + 0.5)


@_none_if_missing
def _ceiling(source: Any) -> int:
    return math.ceil(float(source))


@_none_if_missing
def _floor(source: Any) -> int:
    return math.floor(float(source))


@_none_if_missing
def _second(source: Any) -> int:
    return _as_datetime(source).second


@_none_if_missing
def _minute(source: Any) -> int:
    return _as_datetime(source).minute


@_none_if_missing
def _day(source: Any) -> int:
    return _as_datetime(source).day


@_none_if_missing
def _month(source: Any) -> int:
    return _as_datetime(source).month


@_none_if_missing
def _year(source: Any) -> int:
    return _as_datetime(source).year


FUNCTIONS = MappingProxyType({
    entry.name: entry
    for entry in (
        QueryFunction("toupper", _toupper, datatypes.STRING),
        QueryFunction("tolower", _tolower, datatypes.STRING),
        QueryFunction("substring", _substring, datatypes.STRING),
        QueryFunction("substringof", _substringof, datatypes.BOOLEAN),
        QueryFunction("length", _length, datatypes.INT32),
        QueryFunction("trim", _trim, datatypes.STRING),
        QueryFunction("concat", _concat, datatypes.STRING),
        QueryFunction("replace", _replace, datatypes.STRING),
        QueryFunction("startswith", _startswith, datatypes.BOOLEAN),
        QueryFunction("endswith", _endswith, datatypes.BOOLEAN),
        QueryFunction("indexof", _indexof, datatypes.INT32),
        QueryFunction("round", _round, datatypes.INT32),
        QueryFunction("ceiling", _ceiling, datatypes.INT32),
        QueryFunction("floor", _floor, datatypes.INT32),
        QueryFunction("second", _second, datatypes.INT32),
        QueryFunction("minute", _minute, datatypes.INT32),
        QueryFunction("day", _day, datatypes.INT32),
        QueryFunction("month", _month, datatypes.INT32),
        QueryFunction("year", _year, datatypes.INT32),
    )
})


def get_function(name: str) -> QueryFunction | None:
    """Look up a function table entry by name (case-insensitive)."""
    return FUNCTIONS.get(name.lower())
