"""Entity type entity describing the schema a filter is validated against.

An entity type resolves dotted property paths to data properties (which carry
a data type) or navigation properties (which point at another entity type).
Anonymous entity types behave like an absent schema: property paths are not
checked and data types are inferred from literals only.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from filterexpr.core import datatypes
from filterexpr.core.datatypes import DataType


@dataclass(frozen=True)
class StringComparisonOptions:
    """Policy used when comparing string values locally.

    Attributes:
        case_sensitive: Whether "Foo" and "foo" are different values.
        trim_before_compare: Trim both sides before an equality test (SQL-92 style).
    """

    case_sensitive: bool = False
    trim_before_compare: bool = True


CASE_INSENSITIVE_SQL = StringComparisonOptions(case_sensitive=False, trim_before_compare=True)
CASE_SENSITIVE_NON_SQL = StringComparisonOptions(case_sensitive=True, trim_before_compare=False)


@dataclass(frozen=True)
class NamingConvention:
    """Translation between client and server property names."""

    name: str
    client_to_server: Callable[[str], str]

    def client_property_name_to_server(self, name: str) -> str:
        return self.client_to_server(name)


def _pascal_case(name: str) -> str:
    return name[:1].upper() + name[1:]


NamingConvention.NONE = NamingConvention("none", lambda name: name)
NamingConvention.CAMEL_CASE = NamingConvention("camel_case", _pascal_case)

NAMING_CONVENTIONS = {
    "none": NamingConvention.NONE,
    "camel_case": NamingConvention.CAMEL_CASE,
}


@dataclass
class DataProperty:
    """A scalar property holding a value of ``data_type``."""

    name: str
    data_type: DataType
    is_data_property: bool = field(default=True, init=False)
    is_navigation_property: bool = field(default=False, init=False)


@dataclass
class NavigationProperty:
    """A property that points at one (scalar) or many related entities."""

    name: str
    entity_type: "EntityType"
    is_scalar: bool = False
    is_data_property: bool = field(default=False, init=False)
    is_navigation_property: bool = field(default=True, init=False)


Property = DataProperty | NavigationProperty


@dataclass(eq=False)
class EntityType:
    """Schema against which property paths and data types are resolved.

    Instances compare by identity; the validation cache relies on it.

    Attributes:
        name: Entity type name (used in error messages).
        properties: Property name -> property.
        is_anonymous: Treat as schema-less when True.
        comparison_options: String comparison policy, if the schema defines one.
        naming_convention: Client to server property name translation.
    """

    name: str
    properties: dict[str, Property] = field(default_factory=dict)
    is_anonymous: bool = False
    comparison_options: StringComparisonOptions | None = None
    naming_convention: NamingConvention = NamingConvention.NONE

    def add_property(self, prop: Property) -> "EntityType":
        """Add a property and return self for chaining."""
        self.properties[prop.name] = prop
        return self

    def get_property(self, property_path: str) -> Property | None:
        """Resolve a dotted property path.

        Intermediate segments must be navigation properties.

        Returns:
            The final property, or None if any segment cannot be resolved.
        """
        entity_type: EntityType = self
        prop: Property | None = None
        for segment in property_path.split("."):
            if entity_type is None:
                return None
            prop = entity_type.properties.get(segment)
            if prop is None:
                return None
            entity_type = prop.entity_type if prop.is_navigation_property else None
        return prop

    def client_property_path_to_server(self, property_path: str) -> str:
        """Translate every segment of a dotted path to its server name."""
        return ".".join(
            self.naming_convention.client_property_name_to_server(segment)
            for segment in property_path.split(".")
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], _known: dict[str, "EntityType"] | None = None) -> "EntityType":
        """Build an entity type from a JSON-style document.

        Example:
            {
                "name": "Order",
                "properties": {
                    "freight": "Decimal",
                    "orderDetails": {"navigation": {"name": "OrderDetail", ...}},
                    "customer": {"navigation": "Customer", "isScalar": true}
                }
            }

        A navigation given as a string refers to an entity type defined
        elsewhere in the same document.
        """
        known = _known if _known is not None else {}
        if "name" not in data:
            raise ValueError("Entity type definition requires a 'name'")

        entity_type = known.get(data["name"])
        if entity_type is None:
            entity_type = cls(name=data["name"])
            known[entity_type.name] = entity_type

        entity_type.is_anonymous = bool(data.get("isAnonymous", False))
        convention = data.get("namingConvention")
        if convention is not None:
            if convention not in NAMING_CONVENTIONS:
                raise ValueError(f"Unknown naming convention: {convention}")
            entity_type.naming_convention = NAMING_CONVENTIONS[convention]

        options = data.get("comparisonOptions")
        if options is not None:
            entity_type.comparison_options = StringComparisonOptions(
                case_sensitive=bool(options.get("caseSensitive", False)),
                trim_before_compare=bool(options.get("trimBeforeCompare", True)),
            )

        for name, definition in data.get("properties", {}).items():
            if isinstance(definition, str):
                data_type = datatypes.from_name(definition)
                if data_type is None:
                    raise ValueError(f"Unknown data type '{definition}' for property '{name}'")
                entity_type.add_property(DataProperty(name, data_type))
                continue

            target = definition.get("navigation")
            if isinstance(target, str):
                target_type = known.get(target)
                if target_type is None:
                    target_type = cls(name=target)
                    known[target] = target_type
            elif isinstance(target, dict):
                target_type = cls.from_dict(target, known)
            else:
                raise ValueError(f"Property '{name}' must be a data type name or a navigation")
            entity_type.add_property(
                NavigationProperty(name, target_type, is_scalar=bool(definition.get("isScalar", False)))
            )

        return entity_type


def is_schemaless(entity_type: Any) -> bool:
    """True for an absent or anonymous schema."""
    return entity_type is None or getattr(entity_type, "is_anonymous", False)
