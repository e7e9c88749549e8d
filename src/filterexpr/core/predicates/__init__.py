"""Filter predicate API."""

from typing import Any

from .ast import (
    ComparisonNode,
    Expr,
    FunctionCallExpr,
    LiteralExpr,
    LogicalNode,
    Node,
    NodeKind,
    PassthroughNode,
    Predicate,
    PropertyPathExpr,
    QuantifiedNode,
    UnaryNode,
)
from .evaluator import to_function
from .exceptions import (
    PredicateConstructionError,
    PredicateError,
    PredicateEvaluationError,
    PredicateValidationError,
)
from .normalizer import and_, create_predicate, not_, or_
from .operators import OPERATORS, BooleanQueryOp, FilterQueryOp, Operator
from .serializer import to_json, to_json_string
from .visitor import VisitContext


def compile_filter(source: Any, context: Any = None) -> Any:
    """Normalize a filter input and compile it into a ``record -> bool`` function."""
    return to_function(create_predicate(source), context)


__all__ = [
    "compile_filter",
    "create_predicate",
    "and_",
    "or_",
    "not_",
    "to_json",
    "to_json_string",
    "to_function",
    "VisitContext",
    "Node",
    "NodeKind",
    "Predicate",
    "Expr",
    "PassthroughNode",
    "UnaryNode",
    "LogicalNode",
    "ComparisonNode",
    "QuantifiedNode",
    "LiteralExpr",
    "PropertyPathExpr",
    "FunctionCallExpr",
    "Operator",
    "OPERATORS",
    "FilterQueryOp",
    "BooleanQueryOp",
    "PredicateError",
    "PredicateConstructionError",
    "PredicateValidationError",
    "PredicateEvaluationError",
]
