"""Operator registry for predicate nodes.

Every predicate node kind accepts a small set of operators. Each operator has
a canonical key (``"gt"``) and any number of aliases (``">"``,
``"greaterthan"``). The registry is built once at import time and is never
mutated afterwards; ``OperatorRegistry.register`` returns a new registry.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .exceptions import PredicateConstructionError


@dataclass(frozen=True)
class Operator:
    """A canonical operator key for one node kind."""

    key: str
    aliases: tuple[str, ...] = ()
    is_function: bool = False

    def __str__(self) -> str:
        return self.key


class FilterQueryOp(str, Enum):
    """Comparison and quantifier operators usable in place of strings."""

    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    GREATER_THAN_OR_EQUAL = "ge"
    LESS_THAN_OR_EQUAL = "le"
    STARTS_WITH = "startswith"
    ENDS_WITH = "endswith"
    CONTAINS = "contains"
    ANY = "any"
    ALL = "all"


class BooleanQueryOp(str, Enum):
    """Logical operators usable in place of strings."""

    AND = "and"
    OR = "or"
    NOT = "not"


class OperatorRegistry:
    """Per node kind mapping from every accepted spelling to an ``Operator``."""

    def __init__(self, alias_maps: Mapping[str, Mapping[str, Operator]] | None = None):
        self._alias_maps = MappingProxyType(dict(alias_maps or {}))

    def register(self, kind: str, entries: Mapping[str, Mapping[str, Any]]) -> "OperatorRegistry":
        """Return a new registry that also knows the operators of ``kind``.

        Args:
            kind: Node kind name (e.g. "comparison").
            entries: Canonical key -> {"aliases": [...], "is_function": bool}.

        Returns:
            OperatorRegistry: A registry containing the previous kinds plus ``kind``.
        """
        alias_map: dict[str, Operator] = {}
        for key, options in entries.items():
            operator = Operator(
                key=key.lower(),
                aliases=tuple(options.get("aliases", ())),
                is_function=options.get("is_function", False),
            )
            alias_map[operator.key] = operator
            for alias in operator.aliases:
                alias_map[alias.lower()] = operator

        maps = dict(self._alias_maps)
        maps[str(kind)] = MappingProxyType(alias_map)
        return OperatorRegistry(maps)

    def kinds(self) -> list[str]:
        """Names of the node kinds known to this registry."""
        return list(self._alias_maps)

    def operators(self, kind: str) -> list[Operator]:
        """Distinct operators registered for ``kind``."""
        seen: dict[str, Operator] = {}
        for operator in self._alias_maps.get(str(kind), {}).values():
            seen.setdefault(operator.key, operator)
        return list(seen.values())

    def resolve(self, kind: str, token: Any, ok_if_missing: bool = False) -> Operator | None:
        """Resolve ``token`` to the canonical operator of ``kind``.

        Args:
            kind: Node kind name.
            token: A string, an ``Operator`` or an operator enumeration member.
            ok_if_missing: Return None instead of raising when unresolvable.

        Raises:
            PredicateConstructionError: If the token cannot be resolved.
        """
        alias_map = self._alias_maps.get(str(kind), {})
        result = None

        if isinstance(token, Operator):
            result = alias_map.get(token.key)
        elif isinstance(token, Enum):
            result = alias_map.get(str(token.value).lower())
        elif isinstance(token, str):
            result = alias_map.get(token.lower())

        if result is None and not ok_if_missing:
            raise PredicateConstructionError(f"Unable to resolve operator: {token!r}")
        return result


OPERATORS = (
    OperatorRegistry()
    .register("unary", {
        "not": {"aliases": ["!", "~"]},
    })
    .register("logical", {
        "and": {"aliases": ["&&"]},
        "or": {"aliases": ["||"]},
    })
    .register("comparison", {
        "eq": {"aliases": ["==", "=", "equals"]},
        "ne": {"aliases": ["!=", "~=", "notequals"]},
        "lt": {"aliases": ["<", "lessthan"]},
        "le": {"aliases": ["<=", "lessthanorequal"]},
        "gt": {"aliases": [">", "greaterthan"]},
        "ge": {"aliases": [">=", "greaterthanorequal"]},
        "startswith": {"is_function": True},
        "endswith": {"is_function": True},
        "contains": {"aliases": ["substringof"], "is_function": True},
    })
    .register("quantified", {
        "any": {"aliases": ["some"]},
        "all": {"aliases": ["every"]},
    })
)
