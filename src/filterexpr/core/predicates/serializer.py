"""Serializer backend: renders expression trees in the canonical JSON form.

The JSON form is the interchange format of filters; feeding it back into
``create_predicate`` yields an equivalent tree. Two-child 'and' nodes are
merged into a single object where that does not change the meaning::

    {"and": [{"freight": {"gt": 10}}, {"shipCity": {"startswith": "C"}}]}
    -> {"freight": {"gt": 10}, "shipCity": {"startswith": "C"}}
"""

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Mapping

from filterexpr.core.logging import get_logger
from filterexpr.domain.entities.entity_type import EntityType

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
from .operators import OPERATORS
from .visitor import Backend, Handler, VisitContext

logger = get_logger(__name__)


def _is_wrapper(value: Any) -> bool:
    return isinstance(value, Mapping) and "value" in value


def _is_scoped_key(key: Any) -> bool:
    # Merging below 'not', 'any' or 'all' would move a condition into their scope.
    return bool(
        OPERATORS.resolve("unary", key, ok_if_missing=True)
        or OPERATORS.resolve("quantified", key, ok_if_missing=True)
    )


def merge_json(first: Mapping[str, Any], second: Mapping[str, Any]) -> dict[str, Any] | None:
    """Deep merge two JSON objects.

    Returns:
        The merged object, or None when a key collision cannot be merged.
        Neither input is modified.
    """
    merged = dict(first)
    for key, value in second.items():
        if key not in merged:
            merged[key] = value
            continue
        existing = merged[key]
        if _is_scoped_key(key):
            return None
        if not isinstance(existing, Mapping) or not isinstance(value, Mapping):
            return None
        if _is_wrapper(existing) or _is_wrapper(value):
            return None
        combined = merge_json(existing, value)
        if combined is None:
            return None
        merged[key] = combined
    return merged


def _format_argument(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        value = value.isoformat()
    text = str(value)
    if "'" in text:
        return f'"{text}"'
    return f"'{text}'"


class JSONSerializer(Backend):
    """Renders a validated tree as canonical JSON."""

    name = "to_json"

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

    def _passthrough(self, node: PassthroughNode, context: VisitContext) -> str:
        return node.text

    def _unary(self, node: UnaryNode, context: VisitContext) -> dict[str, Any]:
        return {node.op.key: self.visit(node.operand, context)}

    def _logical(self, node: LogicalNode, context: VisitContext) -> Any:
        values = [self.visit(child, context) for child in node.children]
        if node.op.key == "and" and len(values) == 2 and not any(isinstance(v, str) for v in values):
            merged = merge_json(values[0], values[1])
            if merged is not None:
                return merged
        return {node.op.key: values}

    def _comparison(self, node: ComparisonNode, context: VisitContext) -> dict[str, Any]:
        left = self.visit(node.left, context)
        right = self.visit(node.right, context)
        if isinstance(node.right, PropertyPathExpr):
            right = {"value": right, "isProperty": True}
        if node.op.key == "eq":
            return {left: right}
        return {left: {node.op.key: right}}

    def _quantified(self, node: QuantifiedNode, context: VisitContext) -> dict[str, Any]:
        collection = self.visit(node.collection_expr, context)
        body = self.visit(node.body, context.with_schema(node.collection_expr.data_type))
        return {collection: {node.op.key: body}}

    def _literal(self, node: LiteralExpr, context: VisitContext) -> Any:
        if node.has_explicit_data_type or context.explicit_data_type:
            return {"value": node.value, "dataType": node.data_type.name}
        return node.value

    def _property_path(self, node: PropertyPathExpr, context: VisitContext) -> str:
        if context.server and isinstance(context.schema, EntityType):
            return context.schema.client_property_path_to_server(node.path)
        return node.path

    def _function_call(self, node: FunctionCallExpr, context: VisitContext) -> str:
        args = []
        for arg in node.args:
            if isinstance(arg, LiteralExpr):
                args.append(_format_argument(arg.value))
            else:
                args.append(self.visit(arg, context))
        return f"{node.name}({','.join(args)})"


_serializer = JSONSerializer()


def to_json(node: Node, context: Any = None) -> Any:
    """Canonical JSON form of ``node``.

    Args:
        node: Expression tree.
        context: None, an entity type, a ``VisitContext`` or a mapping with a
            ``schema`` field and optional ``server`` / ``explicit_data_type``.

    Returns:
        A JSON-compatible object, or the raw text of a passthrough node.
    """
    return _serializer(node, context)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json_string(node: Node, context: Any = None, **kwargs: Any) -> str:
    """``to_json`` rendered as a JSON string; extra kwargs go to ``json.dumps``."""
    result = json.dumps(to_json(node, context), default=_json_default, **kwargs)
    logger.debug("Serialized predicate", kind=node.kind.value, length=len(result))
    return result
