"""Parser for expression operands.

Operands of comparisons are given as raw values or as text. Text may be a
quoted string, a property path, a bare literal, or a nested function call
such as ``toupper(substring(companyName, 1, 2))``. Function calls are
linearized by repeatedly replacing the innermost parenthesized group with a
numbered placeholder, so no full grammar is needed. Quoted text is masked
while doing so, so parentheses inside string arguments are left alone.
"""

import re
from dataclasses import dataclass, replace
from typing import Any, Mapping

from filterexpr.core import datatypes
from filterexpr.core.datatypes import DataType
from filterexpr.core.logging import get_logger
from filterexpr.domain.entities.entity_type import is_schemaless

from .ast import Expr, FunctionCallExpr, LiteralExpr, PropertyPathExpr
from .exceptions import PredicateConstructionError, PredicateValidationError

logger = get_logger(__name__)

PLACEHOLDER = chr(191)
QUOTE_PLACEHOLDER = chr(190)
QUOTED_PATTERN = re.compile(r"'[^']*'|\"[^\"]*\"")
QUOTE_MARKER_PATTERN = re.compile(f"{QUOTE_PLACEHOLDER}(\\d+){QUOTE_PLACEHOLDER}")
PAREN_GROUP_PATTERN = re.compile(r"\([^()]*\)")
IDENTIFIER_PATTERN = re.compile(r"^[a-z_][\w.$]*$", re.IGNORECASE)
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
# Comma separated arguments, ignoring commas inside single or double quotes.
COMMA_DELIM_SINGLE = re.compile(r"(\s*'[^']*'|[^,]+)")
COMMA_DELIM_DOUBLE = re.compile(r'(\s*"[^"]*"|[^,]+)')


@dataclass(frozen=True)
class ExprContext:
    """Type inference context for an operand.

    Attributes:
        schema: Entity type the operand is resolved against (may be None).
        is_rhs: True for the right-hand side of a comparison.
        data_type: Data type hint for literals (``UNDEFINED`` = do not parse).
        is_fn_arg: True while parsing function arguments.
    """

    schema: Any = None
    is_rhs: bool = False
    data_type: DataType | None = None
    is_fn_arg: bool = False


class ExpressionParser:
    """Parses operand text into an ``Expr``.

    ``parse`` returns None instead of raising when the text looks like a
    function call that cannot be resolved; callers decide what that means.
    """

    def __init__(self, source: str, context: ExprContext):
        self.context = context
        self.groups: list[str] = []
        self.quoted: list[str] = []
        self.source = self._extract_groups(QUOTED_PATTERN.sub(self._mask_quoted, source))

    def _mask_quoted(self, match: re.Match) -> str:
        self.quoted.append(match.group(0))
        return f"{QUOTE_PLACEHOLDER}{len(self.quoted) - 1}{QUOTE_PLACEHOLDER}"

    def _unmask_quoted(self, text: str) -> str:
        return QUOTE_MARKER_PATTERN.sub(lambda m: self.quoted[int(m.group(1))], text)

    def _extract_groups(self, source: str) -> str:
        """Replace innermost parenthesized groups with placeholders until none remain."""
        match = PAREN_GROUP_PATTERN.search(source)
        while match:
            group = match.group(0)
            source = source.replace(group, f"{PLACEHOLDER}{len(self.groups)}", 1)
            self.groups.append(group)
            match = PAREN_GROUP_PATTERN.search(source)
        return source

    def parse(self) -> Expr | None:
        """Parse the whole operand."""
        return self._expression(self.source, self.context)

    def _expression(self, source: str, context: ExprContext) -> Expr | None:
        parts = source.split(PLACEHOLDER)
        if len(parts) == 1:
            return self._literal_or_property(parts[0], context)
        return self._function_call(parts, context)

    def _function_call(self, parts: list[str], context: ExprContext) -> Expr | None:
        """Parse ``name<placeholder>`` into a function call, or None."""
        try:
            name = parts[0].strip().lower()
            arg_source = self._unmask_quoted(self.groups[int(parts[1])]).strip()
            if arg_source.startswith("("):
                arg_source = arg_source[1:-1]

            delimiter = COMMA_DELIM_SINGLE if "'" in arg_source else COMMA_DELIM_DOUBLE
            arg_context = replace(context, data_type=datatypes.UNDEFINED, is_fn_arg=True)
            args = []
            for arg_text in delimiter.findall(arg_source):
                arg = self._expression(arg_text, arg_context)
                if arg is None:
                    return None
                args.append(arg)

            return FunctionCallExpr(name=name, args=args)
        except (PredicateConstructionError, ValueError, IndexError) as e:
            logger.debug("Unable to parse function expression", parts=parts, error=str(e))
            return None

    def _literal_or_property(self, value: str, context: ExprContext) -> Expr:
        """Resolve a bare token to a quoted literal, a property path or a literal."""
        value = self._unmask_quoted(value).strip()
        first_char = value[:1]
        is_quoted = first_char in ("'", '"') and len(value) > 1 and value.endswith(first_char)
        if is_quoted:
            return LiteralExpr.create(value[1:-1], context.data_type or datatypes.STRING)

        schema = context.schema
        if is_schemaless(schema):
            # Only reached for left-hand operands (and their function arguments).
            if context.is_fn_arg and NUMBER_PATTERN.match(value):
                return LiteralExpr.create(_number(value))
            return PropertyPathExpr(path=value)

        if IDENTIFIER_PATTERN.match(value):
            # An unknown identifier on the left is reported as a bad path, not a literal.
            if schema.get_property(value) is not None or not (context.is_rhs or context.is_fn_arg):
                return PropertyPathExpr(path=value)

        if context.is_fn_arg and NUMBER_PATTERN.match(value):
            return LiteralExpr.create(_number(value))
        return LiteralExpr.create(value, context.data_type)


def _number(text: str) -> int | float:
    try:
        return int(text)
    except ValueError:
        return float(text)


def create_expr(source: Any, context: ExprContext) -> Expr | None:
    """Build a validated operand expression from a raw source value.

    Args:
        source: Raw operand: text, a plain value, or an explicit wrapper
            ``{"value": ..., "dataType": ...}`` / ``{"value": ..., "isProperty": true}``.
        context: Type inference context.

    Returns:
        The expression, or None when a left-hand operand cannot be parsed.

    Raises:
        PredicateValidationError: If an explicit wrapper has no value.
        PredicateConstructionError: If an explicit data type name is unknown.
    """
    schema = context.schema

    if not isinstance(source, str):
        if isinstance(source, Mapping):
            if "value" not in source:
                schema_name = getattr(schema, "name", None)
                raise PredicateValidationError(
                    f"Unable to resolve an expression for: {dict(source)} on entity type: {schema_name}"
                )
            if source.get("isProperty"):
                expr = PropertyPathExpr(path=source["value"])
                expr.validate(schema)
                return expr
            # Explicit literals stay tagged so a serialize/parse round trip
            # never reads them back as property paths.
            return LiteralExpr.create(
                source["value"], source.get("dataType") or context.data_type, True
            )
        return LiteralExpr.create(source, context.data_type)

    # Without a schema there is nothing to resolve a right-hand operand against.
    if context.is_rhs and is_schemaless(schema):
        return LiteralExpr.create(source, context.data_type)

    expr = ExpressionParser(source, context).parse()
    if expr is None:
        if context.is_rhs:
            logger.debug("Falling back to literal for right-hand operand", source=source)
            return LiteralExpr.create(source, context.data_type)
        return None

    expr.validate(schema)
    return expr
