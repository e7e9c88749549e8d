"""Backend dispatch over expression trees.

A backend is a named table of handlers, one per node kind. Calling a
backend on a node normalizes the context, validates the tree against the
context's schema and then dispatches on the node kind. Handlers recurse
through ``visit``, which dispatches without validating again.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Callable

from filterexpr.domain.entities.entity_type import EntityType, StringComparisonOptions

from .ast import Node, NodeKind
from .exceptions import PredicateError

Handler = Callable[[Any, "VisitContext"], Any]


@dataclass(frozen=True)
class VisitContext:
    """Context passed to every handler.

    Attributes:
        schema: Entity type the tree is validated against (None = schema-less).
        server: Translate property paths to server names when serializing.
        explicit_data_type: Serialize every literal as ``{value, dataType}``.
        comparison_options: String comparison policy override for evaluation.
        accessor: ``(record, name) -> value`` override for evaluation.
    """

    schema: Any = None
    server: bool = False
    explicit_data_type: bool = False
    comparison_options: StringComparisonOptions | None = None
    accessor: Callable[[Any, str], Any] | None = None

    def with_schema(self, schema: Any) -> "VisitContext":
        """Same context for a nested schema."""
        return replace(self, schema=schema)


_CONTEXT_FIELDS = {f.name for f in fields(VisitContext)}


def coerce_context(context: Any) -> VisitContext:
    """Normalize a context argument.

    None or an empty mapping means no schema, a bare entity type becomes the
    schema, and any other mapping must name its schema explicitly.

    Raises:
        PredicateError: If the context cannot be interpreted.
    """
    if isinstance(context, VisitContext):
        return context
    if context is None or (isinstance(context, Mapping) and not context):
        return VisitContext()
    if isinstance(context, EntityType):
        return VisitContext(schema=context)
    if isinstance(context, Mapping):
        if "schema" not in context:
            raise PredicateError(
                "Backends must be called with a context containing at least a 'schema' field"
            )
        unknown = set(context) - _CONTEXT_FIELDS
        if unknown:
            raise PredicateError(f"Unknown context fields: {', '.join(sorted(unknown))}")
        return VisitContext(**context)
    raise PredicateError(f"Invalid backend context: {context!r}")


class Backend:
    """Base class for backends.

    Subclasses set ``name`` and return one handler per node kind from
    ``build_handlers``; a missing kind is rejected when the backend is built.
    """

    name: str = ""

    def __init__(self) -> None:
        self.handlers: Mapping[NodeKind, Handler] = self.build_handlers()
        missing = [kind.value for kind in NodeKind if kind not in self.handlers]
        if missing:
            raise TypeError(f"Backend '{self.name}' has no handler for: {', '.join(missing)}")

    def build_handlers(self) -> Mapping[NodeKind, Handler]:
        raise NotImplementedError

    def __call__(self, node: Node, context: Any = None) -> Any:
        """Validate ``node`` against the context schema and run the backend."""
        ctx = coerce_context(context)
        node.validate(ctx.schema)
        return self.visit(node, ctx)

    def visit(self, node: Node, context: VisitContext) -> Any:
        """Dispatch on the node kind."""
        return self.handlers[node.kind](node, context)
