"""Schema validation for expression trees.

Validation resolves the operands of comparisons and quantifiers, checks
property paths against the schema and infers data types. A node remembers
the schema it was last validated against; validating again against the same
schema is a no-op, while validating without a schema always runs.
"""

from typing import Any, Callable

from filterexpr.core.datatypes import DataType
from filterexpr.core.logging import get_logger
from filterexpr.domain.entities.entity_type import EntityType, is_schemaless

from .ast import (
    ComparisonNode,
    FunctionCallExpr,
    LiteralExpr,
    LogicalNode,
    Node,
    NodeKind,
    PropertyPathExpr,
    QuantifiedNode,
    UnaryNode,
)
from .exceptions import PredicateValidationError
from .parser import ExprContext, create_expr

logger = get_logger(__name__)


def validate_node(node: Node, schema: Any = None) -> None:
    """Validate ``node`` against ``schema`` unless already done for that schema.

    Raises:
        PredicateValidationError: If the tree does not fit the schema.
    """
    if schema is not None and node.validated_schema is schema:
        return
    if isinstance(node, QuantifiedNode | ComparisonNode):
        logger.debug(
            "Validating predicate", kind=node.kind.value, schema=getattr(schema, "name", None)
        )
    VALIDATORS[node.kind](node, schema)
    node.validated_schema = schema


def _validate_nothing(node: Node, schema: Any) -> None:
    pass


def _validate_unary(node: UnaryNode, schema: Any) -> None:
    validate_node(node.operand, schema)


def _validate_logical(node: LogicalNode, schema: Any) -> None:
    for child in node.children:
        validate_node(child, schema)


def _validate_comparison(node: ComparisonNode, schema: Any) -> None:
    left = create_expr(node.left_source, ExprContext(schema=schema))
    if left is None:
        raise PredicateValidationError(f"Unable to validate 1st expression: {node.left_source!r}")
    if isinstance(left, LiteralExpr):
        raise PredicateValidationError(
            "The left hand side of a comparison cannot be a literal expression, it must be "
            f"a valid property or function expression: {node.left_source!r}"
        )

    hint = left.data_type if isinstance(left.data_type, DataType) else None
    right = create_expr(node.right_source, ExprContext(schema=schema, is_rhs=True, data_type=hint))
    if right is None:
        raise PredicateValidationError(f"Unable to validate 2nd expression: {node.right_source!r}")

    if left.data_type is None:
        left.data_type = right.data_type

    node.left = left
    node.right = right


def _validate_quantified(node: QuantifiedNode, schema: Any) -> None:
    expr = create_expr(node.collection_source, ExprContext(schema=schema))
    if expr is None:
        raise PredicateValidationError(
            f"Unable to validate collection expression: {node.collection_source!r}"
        )

    # The element schema is only known when the outer schema is.
    if is_schemaless(schema):
        expr.data_type = None
    elif not isinstance(expr.data_type, EntityType):
        raise PredicateValidationError(
            f"'{node.collection_source}' on entity type '{schema.name}' is not a navigation "
            f"property and cannot be used with '{node.op.key}'"
        )
    elif isinstance(expr, PropertyPathExpr) and schema.get_property(expr.path).is_scalar:
        raise PredicateValidationError(
            f"'{node.collection_source}' on entity type '{schema.name}' is a single related "
            f"entity, not a collection, and cannot be used with '{node.op.key}'"
        )

    node.collection_expr = expr
    validate_node(node.body, expr.data_type)


def _validate_property_path(node: PropertyPathExpr, schema: Any) -> None:
    if is_schemaless(schema):
        return
    prop = schema.get_property(node.path)
    if prop is None:
        raise PredicateValidationError(
            f"Unable to resolve property path. Entity type: '{schema.name}' "
            f"Property path: '{node.path}'"
        )
    if prop.is_data_property:
        node.data_type = prop.data_type
    else:
        node.data_type = prop.entity_type


def _validate_function_call(node: FunctionCallExpr, schema: Any) -> None:
    for arg in node.args:
        validate_node(arg, schema)


VALIDATORS: dict[NodeKind, Callable[[Any, Any], None]] = {
    NodeKind.PASSTHROUGH: _validate_nothing,
    NodeKind.UNARY: _validate_unary,
    NodeKind.LOGICAL: _validate_logical,
    NodeKind.COMPARISON: _validate_comparison,
    NodeKind.QUANTIFIED: _validate_quantified,
    NodeKind.LITERAL: _validate_nothing,
    NodeKind.PROPERTY_PATH: _validate_property_path,
    NodeKind.FUNCTION_CALL: _validate_function_call,
}
