"""Domain entities for filterexpr.

Entities are pure Python dataclasses describing the schemas filters are
validated against. They have no dependencies on the predicate engine.
"""

from filterexpr.domain.entities.entity_type import (
    CASE_INSENSITIVE_SQL,
    CASE_SENSITIVE_NON_SQL,
    DataProperty,
    EntityType,
    NamingConvention,
    NavigationProperty,
    StringComparisonOptions,
    is_schemaless,
)

__all__ = [
    "CASE_INSENSITIVE_SQL",
    "CASE_SENSITIVE_NON_SQL",
    "DataProperty",
    "EntityType",
    "NamingConvention",
    "NavigationProperty",
    "StringComparisonOptions",
    "is_schemaless",
]
