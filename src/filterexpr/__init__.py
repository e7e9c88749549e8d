"""filterexpr - Filter expressions for entity queries.

Builds expression trees from loosely structured filter inputs, validates
them against an entity schema, renders them as canonical JSON and compiles
them into functions that filter local records.
"""

__version__ = "0.1.0"

from filterexpr.core.predicates import (
    and_,
    create_predicate,
    not_,
    or_,
    to_function,
    to_json,
    to_json_string,
)
from filterexpr.domain.entities import EntityType

__all__ = [
    "__version__",
    "EntityType",
    "and_",
    "create_predicate",
    "not_",
    "or_",
    "to_function",
    "to_json",
    "to_json_string",
]
