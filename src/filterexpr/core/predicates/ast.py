"""Expression tree nodes for filter predicates.

Predicates (boolean valued) and expressions (value valued) form a closed set
of node kinds. Nodes are built by the normalizer and the expression parser
and are not mutated afterwards, except for the fields filled in by
validation (the resolved operands of comparisons and quantifiers, and the
data types of property paths).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar

from filterexpr.core import datatypes
from filterexpr.core.datatypes import DataType

from .exceptions import PredicateConstructionError
from .functions import QueryFunction, get_function
from .operators import Operator


class NodeKind(str, Enum):
    """Node kinds; also the operator registry's kind names."""

    PASSTHROUGH = "passthrough"
    UNARY = "unary"
    LOGICAL = "logical"
    COMPARISON = "comparison"
    QUANTIFIED = "quantified"
    LITERAL = "literal"
    PROPERTY_PATH = "property_path"
    FUNCTION_CALL = "function_call"


@dataclass(eq=False)
class Node:
    """Base class for all tree nodes."""

    kind: ClassVar[NodeKind]
    # Schema this node was last validated against.
    validated_schema: Any = field(default=None, init=False, repr=False)

    def validate(self, schema: Any = None) -> None:
        """Validate against ``schema``; skipped when already validated against it."""
        from .validator import validate_node

        validate_node(self, schema)

    def to_json(self, context: Any = None) -> Any:
        """Canonical JSON form of this node."""
        from .serializer import to_json

        return to_json(self, context)

    def to_function(self, context: Any = None) -> Callable[[Any], Any]:
        """Compile this node into a ``record -> value`` function."""
        from .evaluator import to_function

        return to_function(self, context)

    def __str__(self) -> str:
        from .serializer import to_json_string

        return to_json_string(self)


@dataclass(eq=False)
class Predicate(Node):
    """Boolean valued node."""

    def and_(self, *predicates: Any) -> "Predicate":
        """'And' this predicate with one or more others.

        Accepts predicates, predicate inputs, or a single tuple form such as
        ``p.and_("size", "gt", 2000)``.
        """
        from .normalizer import combine_with

        return combine_with("and", self, predicates)

    def or_(self, *predicates: Any) -> "Predicate":
        """'Or' this predicate with one or more others."""
        from .normalizer import combine_with

        return combine_with("or", self, predicates)

    def not_(self) -> "Predicate":
        """Negated version of this predicate."""
        from .normalizer import make_unary

        return make_unary("not", self)


@dataclass(eq=False)
class Expr(Node):
    """Value valued node; always an operand of a predicate."""


@dataclass(eq=False)
class PassthroughNode(Predicate):
    """Opaque filter text that is only ever serialized back out."""

    kind: ClassVar[NodeKind] = NodeKind.PASSTHROUGH
    text: str = ""


@dataclass(eq=False)
class UnaryNode(Predicate):
    """Logical negation of ``operand``."""

    kind: ClassVar[NodeKind] = NodeKind.UNARY
    op: Operator = None
    operand: Predicate = None


@dataclass(eq=False)
class LogicalNode(Predicate):
    """'and' / 'or' over two or more children."""

    kind: ClassVar[NodeKind] = NodeKind.LOGICAL
    op: Operator = None
    children: list[Predicate] = field(default_factory=list)


@dataclass(eq=False)
class ComparisonNode(Predicate):
    """Binary comparison.

    ``left_source`` and ``right_source`` keep the raw operands as given; the
    expressions they denote depend on the schema, so ``left`` and ``right``
    are resolved during validation.
    """

    kind: ClassVar[NodeKind] = NodeKind.COMPARISON
    op: Operator = None
    left_source: Any = None
    right_source: Any = None
    left: Expr | None = field(default=None, init=False)
    right: Expr | None = field(default=None, init=False)


@dataclass(eq=False)
class QuantifiedNode(Predicate):
    """'any' / 'all' test of ``body`` over a collection property."""

    kind: ClassVar[NodeKind] = NodeKind.QUANTIFIED
    op: Operator = None
    collection_source: Any = None
    body: Predicate = None
    collection_expr: Expr | None = field(default=None, init=False)


@dataclass(eq=False)
class LiteralExpr(Expr):
    """A constant value."""

    kind: ClassVar[NodeKind] = NodeKind.LITERAL
    value: Any = None
    data_type: DataType | None = None
    has_explicit_data_type: bool = False

    @classmethod
    def create(
        cls,
        value: Any,
        data_type: DataType | str | None = None,
        has_explicit_data_type: bool = False,
    ) -> "LiteralExpr":
        """Build a literal, inferring and parsing its data type.

        An ``UNDEFINED`` data type means "leave the value as given".
        """
        try:
            resolved = datatypes.resolve_data_type(data_type) or datatypes.infer_data_type(value)
        except ValueError as e:
            raise PredicateConstructionError(str(e)) from e
        return cls(
            value=datatypes.parse_value(value, resolved),
            data_type=resolved,
            has_explicit_data_type=has_explicit_data_type,
        )


@dataclass(eq=False)
class PropertyPathExpr(Expr):
    """Reference to a (possibly nested) record field.

    ``data_type`` is a ``DataType`` for data properties, the target entity
    type for navigation properties, and None when unresolved.
    """

    kind: ClassVar[NodeKind] = NodeKind.PROPERTY_PATH
    path: str = ""
    data_type: Any = field(default=None, init=False)


@dataclass(eq=False)
class FunctionCallExpr(Expr):
    """Call to a function from the built-in function table."""

    kind: ClassVar[NodeKind] = NodeKind.FUNCTION_CALL
    name: str = ""
    args: list[Expr] = field(default_factory=list)
    function: QueryFunction = field(default=None, init=False, repr=False)
    data_type: DataType | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        entry = get_function(self.name)
        if entry is None:
            raise PredicateConstructionError(f"Unknown function: {self.name}")
        self.name = entry.name
        self.function = entry
        self.data_type = entry.data_type
