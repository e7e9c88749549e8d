"""Record accessor used by compiled predicates.

Records may be plain dictionaries or arbitrary objects; values are looked up
by key first and by attribute second. Missing values resolve to None.
"""

from typing import Any, Callable, Iterable


def get_property(record: Any, name: str) -> Any:
    """Return the value of a single property on ``record``, or None."""
    if record is None:
        return None

    # 1. Dictionary access
    if isinstance(record, dict):
        return record.get(name)

    # 2. Object attribute access
    return getattr(record, name, None)


def get_property_path_value(
    record: Any,
    segments: Iterable[str],
    accessor: Callable[[Any, str], Any] = get_property,
) -> Any:
    """Walk ``segments`` across nested records, short-circuiting on None."""
    value = record
    for segment in segments:
        if value is None:
            return None
        value = accessor(value, segment)
    return value
