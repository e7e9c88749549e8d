"""Tests for rendering predicates as canonical JSON."""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from filterexpr.core.predicates import create_predicate, to_json, to_json_string
from filterexpr.core.predicates.serializer import merge_json
from filterexpr.domain.entities.entity_type import EntityType, NamingConvention


class TestComparisons:
    """Test comparison rendering."""

    def test_operator(self):
        assert to_json(create_predicate(["freight", ">", 100])) == {"freight": {"gt": 100}}

    def test_implicit_equality(self):
        assert to_json(create_predicate({"shipCity": "London"})) == {"shipCity": "London"}

    def test_property_on_right(self, order_type):
        predicate = create_predicate({"shipCity": "shipCountry"})

        assert to_json(predicate, order_type) == {
            "shipCity": {"value": "shipCountry", "isProperty": True}
        }

    def test_explicit_literal(self):
        predicate = create_predicate({"freight": {"value": 10, "dataType": "Decimal"}})
        assert to_json(predicate) == {"freight": {"value": Decimal("10"), "dataType": "Decimal"}}

    def test_explicit_data_type_option(self):
        predicate = create_predicate(["freight", "gt", 100])

        assert to_json(predicate, {"schema": None, "explicit_data_type": True}) == {
            "freight": {"gt": {"value": 100, "dataType": "Int32"}}
        }

    def test_schema_types_literal(self, order_type):
        result = to_json(create_predicate({"freight": {"ge": "12.50"}}), order_type)
        assert result == {"freight": {"ge": Decimal("12.50")}}

    def test_guid_literal_is_kept_as_given(self):
        predicate = create_predicate({"customerID": "ABCDEF12-3456-7890-ABCD-EF1234567890"})
        assert to_json(predicate) == {"customerID": "ABCDEF12-3456-7890-ABCD-EF1234567890"}

    @pytest.mark.parametrize(
        "aliases",
        [
            ["eq", "==", "=", "equals"],
            ["ne", "!=", "~=", "notequals"],
            ["gt", ">", "greaterthan"],
            ["le", "<=", "lessthanorequal"],
            ["contains", "substringof"],
        ],
    )
    def test_aliases_serialize_identically(self, aliases):
        results = [to_json(create_predicate(["freight", alias, 5])) for alias in aliases]
        assert all(result == results[0] for result in results)


class TestPredicates:
    """Test rendering of composite predicates."""

    def test_passthrough(self):
        assert to_json(create_predicate("Freight gt 100")) == "Freight gt 100"

    def test_not(self):
        predicate = create_predicate({"!": {"freight": {"gt": 100}}})
        assert to_json(predicate) == {"not": {"freight": {"gt": 100}}}

    def test_quantifier(self):
        predicate = create_predicate(["orderDetails", "some", "quantity", "gt", 5])
        assert to_json(predicate) == {"orderDetails": {"any": {"quantity": {"gt": 5}}}}

    def test_and_is_merged(self):
        predicate = create_predicate(
            {"and": [{"freight": {"gt": 10}}, {"shipCity": {"startswith": "C"}}]}
        )
        assert to_json(predicate) == {"freight": {"gt": 10}, "shipCity": {"startswith": "C"}}

    def test_and_merges_same_property(self):
        predicate = create_predicate({"and": [{"freight": {"gt": 10}}, {"freight": {"lt": 100}}]})
        assert to_json(predicate) == {"freight": {"gt": 10, "lt": 100}}

    def test_and_collision_is_not_merged(self):
        predicate = create_predicate({"and": [{"freight": 10}, {"freight": 20}]})
        assert to_json(predicate) == {"and": [{"freight": 10}, {"freight": 20}]}

    def test_and_of_nots_is_not_merged(self):
        predicate = create_predicate({"and": [{"not": {"a": 1}}, {"not": {"b": 2}}]})
        assert to_json(predicate) == {"and": [{"not": {"a": 1}}, {"not": {"b": 2}}]}

    def test_and_of_quantifiers_is_not_merged(self):
        predicate = create_predicate(
            {"and": [{"orders": {"any": {"a": 1}}}, {"orders": {"any": {"b": 2}}}]}
        )
        assert to_json(predicate) == {
            "and": [{"orders": {"any": {"a": 1}}}, {"orders": {"any": {"b": 2}}}]
        }

    def test_and_with_passthrough_is_not_merged(self):
        predicate = create_predicate({"and": ["Freight gt 100", {"shipCity": "London"}]})
        assert to_json(predicate) == {"and": ["Freight gt 100", {"shipCity": "London"}]}

    def test_and_of_three(self):
        predicate = create_predicate({"and": [{"a": 1}, {"b": 2}, {"c": 3}]})
        assert to_json(predicate) == {"and": [{"a": 1}, {"b": 2}, {"c": 3}]}

    def test_or_is_never_merged(self):
        predicate = create_predicate({"or": [{"a": 1}, {"b": 2}]})
        assert to_json(predicate) == {"or": [{"a": 1}, {"b": 2}]}


class TestMergeJson:
    """Test the deep merge used for 'and' canonicalization."""

    def test_inputs_are_not_modified(self):
        first = {"freight": {"gt": 10}}
        second = {"freight": {"lt": 100}}

        merge_json(first, second)

        assert first == {"freight": {"gt": 10}}

    def test_wrappers_are_not_merged(self):
        first = {"freight": {"value": 10, "dataType": "Decimal"}}
        second = {"freight": {"gt": 5}}

        assert merge_json(first, second) is None


class TestExpressions:
    """Test expression rendering."""

    def test_function_call(self):
        predicate = create_predicate({"toupper(shipCity)": "CHICAGO"})
        assert to_json(predicate) == {"toupper(shipCity)": "CHICAGO"}

    def test_function_arguments(self):
        """Test numbers render bare and strings quoted."""
        predicate = create_predicate({"substring(shipCity, 1, 2)": "hi"})
        assert to_json(predicate) == {"substring(shipCity,1,2)": "hi"}

        predicate = create_predicate({"substringof('ica', shipCity)": True})
        assert to_json(predicate) == {"substringof('ica',shipCity)": True}

    def test_apostrophe_argument(self):
        predicate = create_predicate({"substringof(\"O'Brien\", shipName)": True})
        assert to_json(predicate) == {"substringof(\"O'Brien\",shipName)": True}

    def test_server_names(self, order_schema_document):
        schema = EntityType.from_dict(order_schema_document)
        predicate = create_predicate({"shipCity": "London", "customer.city": "Paris"})

        assert to_json(predicate, {"schema": schema, "server": True}) == {
            "ShipCity": "London",
            "Customer.City": "Paris",
        }

    def test_server_names_in_functions(self, order_type):
        order_type.naming_convention = NamingConvention.CAMEL_CASE
        predicate = create_predicate({"tolower(shipCity)": "london"})

        assert to_json(predicate, {"schema": order_type, "server": True}) == {
            "tolower(ShipCity)": "london"
        }

    def test_client_names_by_default(self, order_schema_document):
        schema = EntityType.from_dict(order_schema_document)
        assert to_json(create_predicate({"shipCity": "London"}), schema) == {"shipCity": "London"}


class TestJsonString:
    """Test rendering to JSON text."""

    def test_dates_and_decimals(self):
        predicate = create_predicate(
            {"orderDate": datetime(2020, 1, 2, 3, 4, 5), "freight": Decimal("12.5")}
        )

        assert json.loads(to_json_string(predicate)) == {
            "orderDate": "2020-01-02T03:04:05",
            "freight": 12.5,
        }

    def test_str_is_json(self):
        predicate = create_predicate(["freight", ">", 100])
        assert str(predicate) == to_json_string(predicate) == '{"freight": {"gt": 100}}'

    def test_passthrough_string(self):
        assert to_json_string(create_predicate("Freight gt 100")) == '"Freight gt 100"'
