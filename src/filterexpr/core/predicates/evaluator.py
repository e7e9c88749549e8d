"""Evaluator backend: compiles expression trees into record functions.

``to_function(tree, context)`` returns a function ``record -> value``; for
predicates the value is a bool. Closures are composed bottom-up once per
compilation, so evaluating a record does no dispatch and keeps no state.
"""

import operator
from typing import Any, Callable, Mapping

from filterexpr.core.config import get_settings
from filterexpr.core.datatypes import GUID, DataType, get_comparable_fn
from filterexpr.core.logging import get_logger
from filterexpr.domain.entities.entity_type import StringComparisonOptions
from filterexpr.domain.services.record_accessor import get_property, get_property_path_value

from .ast import (
    ComparisonNode,
    FunctionCallExpr,
    LiteralExpr,
    LogicalNode,
    Node,
    NodeKind,
    PassthroughNode,
    PropertyPathExpr,
    QuantifiedNode,
    UnaryNode,
)
from .exceptions import PredicateEvaluationError
from .operators import Operator
from .visitor import Backend, Handler, VisitContext

logger = get_logger(__name__)

RecordFn = Callable[[Any], Any]

RELATIONAL_OPERATORS = {
    "gt": operator.gt,
    "ge": operator.ge,
    "lt": operator.lt,
    "le": operator.le,
}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def string_equals(a: Any, b: Any, options: StringComparisonOptions) -> bool:
    """Equality of two strings under the comparison policy."""
    if b is None:
        return False
    a, b = _text(a), _text(b)
    if options.trim_before_compare:
        a, b = a.strip(), b.strip()
    if not options.case_sensitive:
        a, b = a.lower(), b.lower()
    return a == b


def _cased(a: Any, b: Any, options: StringComparisonOptions) -> tuple[str, str]:
    a, b = _text(a), _text(b)
    if not options.case_sensitive:
        a, b = a.lower(), b.lower()
    return a, b


def string_starts_with(a: Any, b: Any, options: StringComparisonOptions) -> bool:
    a, b = _cased(a, b, options)
    return a.startswith(b)


def string_ends_with(a: Any, b: Any, options: StringComparisonOptions) -> bool:
    a, b = _cased(a, b, options)
    return a.endswith(b)


def string_contains(a: Any, b: Any, options: StringComparisonOptions) -> bool:
    a, b = _cased(a, b, options)
    return b in a


def get_comparison_fn(
    op: Operator, data_type: Any, options: StringComparisonOptions
) -> Callable[[Any, Any], bool]:
    """Comparison function for an operator and the operands' data type.

    Raises:
        PredicateEvaluationError: If the operator is unknown.
    """
    comparable = get_comparable_fn(data_type)
    # Dates and GUIDs compare by value, not by the string policy.
    by_value = isinstance(data_type, DataType) and (data_type.is_date or data_type is GUID)

    def uses_string_rules(value: Any) -> bool:
        return bool(value) and isinstance(value, str) and not by_value

    if op.key == "eq":
        def compare(v1: Any, v2: Any) -> bool:
            if uses_string_rules(v1):
                return string_equals(v1, v2, options)
            return comparable(v1) == comparable(v2)
        return compare

    if op.key == "ne":
        def compare(v1: Any, v2: Any) -> bool:
            if uses_string_rules(v1):
                return not string_equals(v1, v2, options)
            return comparable(v1) != comparable(v2)
        return compare

    if op.key in RELATIONAL_OPERATORS:
        relation = RELATIONAL_OPERATORS[op.key]

        def compare(v1: Any, v2: Any) -> bool:
            try:
                return relation(comparable(v1), comparable(v2))
            except TypeError:
                # Values that cannot be ordered (e.g. None < 5) never match
                return False
        return compare

    if op.key == "startswith":
        return lambda v1, v2: string_starts_with(v1, v2, options)
    if op.key == "endswith":
        return lambda v1, v2: string_ends_with(v1, v2, options)
    if op.key == "contains":
        return lambda v1, v2: string_contains(v1, v2, options)

    raise PredicateEvaluationError(f"Unknown operator: {op.key}")


class FunctionCompiler(Backend):
    """Compiles a validated tree into a ``record -> value`` function."""

    name = "to_function"

    def build_handlers(self) -> Mapping[NodeKind, Handler]:
        return {
            NodeKind.PASSTHROUGH: self._passthrough,
            NodeKind.UNARY: self._unary,
            NodeKind.LOGICAL: self._logical,
            NodeKind.COMPARISON: self._comparison,
            NodeKind.QUANTIFIED: self._quantified,
            NodeKind.LITERAL: self._literal,
            NodeKind.PROPERTY_PATH: self._property_path,
            NodeKind.FUNCTION_CALL: self._function_call,
        }

    def _comparison_options(self, context: VisitContext) -> StringComparisonOptions:
        if context.comparison_options is not None:
            return context.comparison_options
        schema_options = getattr(context.schema, "comparison_options", None)
        if schema_options is not None:
            return schema_options
        settings = get_settings()
        return StringComparisonOptions(
            case_sensitive=settings.string_case_sensitive,
            trim_before_compare=settings.string_trim_before_compare,
        )

    def _passthrough(self, node: PassthroughNode, context: VisitContext) -> RecordFn:
        raise PredicateEvaluationError(
            f"Cannot execute a passthrough predicate against local records: {node.text}"
        )

    def _unary(self, node: UnaryNode, context: VisitContext) -> RecordFn:
        if node.op.key != "not":
            raise PredicateEvaluationError(f"Invalid unary operator: {node.op.key}")
        operand = self.visit(node.operand, context)
        return lambda record: not operand(record)

    def _logical(self, node: LogicalNode, context: VisitContext) -> RecordFn:
        children = [self.visit(child, context) for child in node.children]
        if node.op.key == "and":
            return lambda record: all(child(record) for child in children)
        if node.op.key == "or":
            return lambda record: any(child(record) for child in children)
        raise PredicateEvaluationError(f"Invalid boolean operator: {node.op.key}")

    def _comparison(self, node: ComparisonNode, context: VisitContext) -> RecordFn:
        data_type = node.left.data_type or node.right.data_type
        compare = get_comparison_fn(node.op, data_type, self._comparison_options(context))
        left = self.visit(node.left, context)
        right = self.visit(node.right, context)
        return lambda record: compare(left(record), right(record))

    def _quantified(self, node: QuantifiedNode, context: VisitContext) -> RecordFn:
        collection = self.visit(node.collection_expr, context)
        body = self.visit(node.body, context.with_schema(node.collection_expr.data_type))

        if node.op.key == "any":
            return lambda record: any(body(item) for item in (collection(record) or ()))
        if node.op.key == "all":
            return lambda record: all(body(item) for item in (collection(record) or ()))
        raise PredicateEvaluationError(f"Unknown operator: {node.op.key}")

    def _literal(self, node: LiteralExpr, context: VisitContext) -> RecordFn:
        value = node.value
        return lambda record: value

    def _property_path(self, node: PropertyPathExpr, context: VisitContext) -> RecordFn:
        accessor = context.accessor or get_property
        path = node.path
        segments = path.split(".")
        if len(segments) == 1:
            return lambda record: accessor(record, path)
        return lambda record: get_property_path_value(record, segments, accessor)

    def _function_call(self, node: FunctionCallExpr, context: VisitContext) -> RecordFn:
        args = [self.visit(arg, context) for arg in node.args]
        fn = node.function.fn
        return lambda record: fn(*(arg(record) for arg in args))


_compiler = FunctionCompiler()


def to_function(node: Node, context: Any = None) -> RecordFn:
    """Compile ``node`` into a ``record -> value`` function.

    Args:
        node: Expression tree.
        context: None, an entity type, a ``VisitContext`` or a mapping with a
            ``schema`` field.

    Raises:
        PredicateValidationError: If the tree does not validate.
        PredicateEvaluationError: If the tree cannot be evaluated locally.
    """
    fn = _compiler(node, context)
    logger.debug("Compiled predicate", kind=node.kind.value)
    return fn
