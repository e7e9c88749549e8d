"""Normalization of loosely structured filter inputs into expression trees.

Accepted input shapes:

- an existing predicate node, returned unchanged
- a one element list, normalized recursively
- a tuple form ``[path, op, value]`` or ``[path, "any", path2, op, value]``
- a passthrough string, wrapped verbatim
- an object form such as ``{"freight": {"gt": 100}, "shipCity": "London"}``

Each shape has its own constructor; ``create_predicate`` selects one with an
explicit check. Composite factories may return a simpler node than asked for:
an 'and' / 'or' over a single child is that child, and over no children is
None.
"""

from collections.abc import Mapping
from typing import Any

from filterexpr.core.logging import get_logger

from .ast import (
    ComparisonNode,
    LogicalNode,
    PassthroughNode,
    Predicate,
    QuantifiedNode,
    UnaryNode,
)
from .exceptions import PredicateConstructionError
from .operators import OPERATORS

logger = get_logger(__name__)


def create_predicate(*args: Any) -> Predicate:
    """Normalize any supported input into a predicate.

    ``create_predicate("freight", ">", 100)`` is the same as
    ``create_predicate(["freight", ">", 100])``.

    Raises:
        PredicateConstructionError: If the input cannot be interpreted.
    """
    if len(args) == 0:
        raise PredicateConstructionError("create_predicate() requires at least one argument")
    if len(args) > 1:
        return from_tuple(list(args))

    source = args[0]
    if isinstance(source, Predicate):
        return source
    if isinstance(source, (list, tuple)):
        if len(source) == 1:
            return create_predicate(source[0])
        return from_tuple(list(source))
    if isinstance(source, str):
        return make_passthrough(source)
    if isinstance(source, Mapping):
        return from_object(source)
    raise PredicateConstructionError(f"Unable to convert to a predicate: {source!r}")


def from_tuple(items: list[Any]) -> Predicate:
    """Build a predicate from ``[path, op, value]`` or a longer odd-length chain.

    ``[a, "any", b, "gt", 5]`` folds into ``{a: {"any": {b: {"gt": 5}}}}``.
    """
    if len(items) < 3 or len(items) % 2 == 0:
        raise PredicateConstructionError(
            f"Unable to convert to a predicate, expected 3 or 5 elements: {items!r}"
        )
    return from_object(_fold_tuple(items))


def _fold_tuple(items: list[Any]) -> dict[Any, Any]:
    # Operators may be strings, Operator objects or enum members; all are
    # valid keys and resolve the same way.
    path, op = items[0], items[1]
    if len(items) == 3:
        return {path: {op: items[2]}}
    return {path: {op: _fold_tuple(items[2:])}}


def from_object(source: Mapping[Any, Any]) -> Predicate:
    """Build a predicate from an object form, 'and'-ing multiple keys."""
    predicates = [_from_key_value(key, value) for key, value in source.items()]
    if len(predicates) == 1:
        return predicates[0]
    return make_logical("and", predicates)


def _is_literal_value(value: Any) -> bool:
    # Scalars, dates and None; anything that is not a mapping or a sequence.
    return value is None or not isinstance(value, (Mapping, list, tuple))


def _is_literal_wrapper(value: Any) -> bool:
    return isinstance(value, Mapping) and "value" in value


def _from_key_value(key: Any, value: Any) -> Predicate:
    # { "and": [a, b] }
    if OPERATORS.resolve("logical", key, ok_if_missing=True):
        return make_logical(key, value)

    # { "not": a }
    if OPERATORS.resolve("unary", key, ok_if_missing=True):
        return make_unary(key, value)

    # { "freight": 100 } or { "freight": { "value": 100, "dataType": "Decimal" } }
    if isinstance(value, Predicate):
        raise PredicateConstructionError(f"Unable to resolve predicate after the phrase: {key}")
    if _is_literal_value(value) or _is_literal_wrapper(value):
        return make_comparison("eq", key, value)

    if isinstance(value, (list, tuple)):
        raise PredicateConstructionError(f"Unable to resolve predicate after the phrase: {key}")

    predicates = []
    for op, operand in value.items():
        # { "orders": { "any": {...} } }
        if OPERATORS.resolve("quantified", op, ok_if_missing=True):
            predicates.append(make_quantified(op, key, operand))
        # { "freight": { ">": 100 } }
        elif OPERATORS.resolve("comparison", op, ok_if_missing=True):
            predicates.append(make_comparison(op, key, operand))
        elif _is_literal_wrapper(operand):
            predicates.append(make_comparison("eq", key, operand))
        else:
            raise PredicateConstructionError(
                f"Unable to resolve predicate after the phrase: '{key}' for operator: '{op}' "
                f"and value: '{operand}'"
            )

    if len(predicates) == 1:
        return predicates[0]
    return make_logical("and", predicates)


def make_passthrough(text: str) -> PassthroughNode:
    """Wrap pre-formed filter text."""
    return PassthroughNode(text=text)


def make_unary(op: Any, operand: Any) -> UnaryNode:
    """Build a negation of ``operand``."""
    return UnaryNode(op=OPERATORS.resolve("unary", op), operand=create_predicate(operand))


def make_logical(op: Any, children: Any) -> Predicate | None:
    """Build an 'and' / 'or' predicate.

    A single nested list is flattened and None children are dropped. One
    remaining child is returned as is; none at all returns None.
    """
    operator = OPERATORS.resolve("logical", op)
    if not isinstance(children, (list, tuple)):
        children = [children]
    if len(children) == 1 and isinstance(children[0], (list, tuple)):
        children = children[0]

    predicates = [create_predicate(child) for child in children if child is not None]
    if not predicates:
        return None
    if len(predicates) == 1:
        return predicates[0]
    return LogicalNode(op=operator, children=predicates)


def make_comparison(op: Any, left: Any, right: Any) -> ComparisonNode:
    """Build a comparison; operands are resolved when the node is validated."""
    return ComparisonNode(
        op=OPERATORS.resolve("comparison", op), left_source=left, right_source=right
    )


def make_quantified(op: Any, collection: Any, body: Any) -> QuantifiedNode:
    """Build an 'any' / 'all' predicate over a collection property."""
    return QuantifiedNode(
        op=OPERATORS.resolve("quantified", op),
        collection_source=collection,
        body=create_predicate(body),
    )


def and_(*predicates: Any) -> Predicate | None:
    """'And' predicates together; None inputs are ignored.

    Accepts predicates as separate arguments or as a single list. Returns
    None when nothing is left and the single predicate when one is left.
    """
    return make_logical("and", list(predicates))


def or_(*predicates: Any) -> Predicate | None:
    """'Or' predicates together; None inputs are ignored."""
    return make_logical("or", list(predicates))


def not_(predicate: Any) -> UnaryNode:
    """Negate a predicate."""
    return make_unary("not", predicate)


def _is_tuple_operator(token: Any) -> bool:
    return any(
        OPERATORS.resolve(kind, token, ok_if_missing=True) for kind in ("comparison", "quantified")
    )


def combine_with(op: str, first: Predicate, others: tuple[Any, ...]) -> Predicate:
    """Combine ``first`` with ``others``.

    ``others`` is any number of predicate inputs, a single list of them, or
    one tuple form given inline or as a list (``"size", "gt", 2000``).
    """
    if len(others) == 1 and isinstance(others[0], (list, tuple)):
        others = tuple(others[0])
    if len(others) >= 3 and isinstance(others[0], str) and _is_tuple_operator(others[1]):
        others = (from_tuple(list(others)),)
    logger.debug("Combining predicates", op=op, count=len(others) + 1)
    return make_logical(op, [first, *others])
