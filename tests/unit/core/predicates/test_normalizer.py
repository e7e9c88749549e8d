"""Tests for normalizing filter inputs into expression trees."""

from datetime import datetime

import pytest

from filterexpr.core.predicates import (
    ComparisonNode,
    FilterQueryOp,
    LogicalNode,
    PassthroughNode,
    QuantifiedNode,
    UnaryNode,
    and_,
    create_predicate,
    not_,
    or_,
)
from filterexpr.core.predicates.exceptions import PredicateConstructionError


class TestCreatePredicate:
    """Test the single entry point for every input shape."""

    def test_existing_predicate_is_returned(self):
        predicate = create_predicate({"freight": 100})
        assert create_predicate(predicate) is predicate

    def test_single_element_list(self):
        predicate = create_predicate([{"freight": 100}])
        assert isinstance(predicate, ComparisonNode)

    def test_tuple_form(self):
        predicate = create_predicate(["freight", ">", 100])

        assert isinstance(predicate, ComparisonNode)
        assert predicate.op.key == "gt"
        assert predicate.left_source == "freight"
        assert predicate.right_source == 100

    def test_argument_form_matches_tuple_form(self):
        """Test separate arguments are the same as a list."""
        assert create_predicate("freight", ">", 100).to_json() == create_predicate(
            ["freight", ">", 100]
        ).to_json()

    def test_enum_operator(self):
        predicate = create_predicate("freight", FilterQueryOp.GREATER_THAN, 100)
        assert predicate.to_json() == {"freight": {"gt": 100}}

    def test_five_element_tuple(self):
        """Test the quantified tuple form."""
        predicate = create_predicate(["orderDetails", "any", "quantity", "gt", 5])

        assert isinstance(predicate, QuantifiedNode)
        assert predicate.op.key == "any"
        assert predicate.collection_source == "orderDetails"
        assert isinstance(predicate.body, ComparisonNode)
        assert predicate.body.op.key == "gt"

    def test_longer_odd_tuple(self):
        predicate = create_predicate(["a", "any", "b", "all", "c", "gt", 5])
        assert predicate.to_json() == {"a": {"any": {"b": {"all": {"c": {"gt": 5}}}}}}

    @pytest.mark.parametrize("items", [["freight", ">"], ["freight", ">", 1, 2]])
    def test_bad_tuple_length(self, items):
        with pytest.raises(PredicateConstructionError, match="expected 3 or 5 elements"):
            create_predicate(items)

    def test_passthrough_string(self):
        """Test strings are kept verbatim and never parsed."""
        predicate = create_predicate("Freight gt 100 and ShipCity eq 'London'")

        assert isinstance(predicate, PassthroughNode)
        assert predicate.text == "Freight gt 100 and ShipCity eq 'London'"

    def test_unsupported_input(self):
        with pytest.raises(PredicateConstructionError, match="Unable to convert"):
            create_predicate(42)

    def test_no_arguments(self):
        with pytest.raises(PredicateConstructionError):
            create_predicate()


class TestObjectForm:
    """Test the structured object form."""

    def test_implicit_equality(self):
        predicate = create_predicate({"shipCity": "London"})

        assert isinstance(predicate, ComparisonNode)
        assert predicate.op.key == "eq"

    def test_null_and_date_values_are_literals(self):
        assert create_predicate({"shipCity": None}).op.key == "eq"
        assert create_predicate({"orderDate": datetime(2020, 1, 1)}).op.key == "eq"

    def test_explicit_literal_wrapper(self):
        predicate = create_predicate({"freight": {"value": 10, "dataType": "Decimal"}})

        assert isinstance(predicate, ComparisonNode)
        assert predicate.op.key == "eq"
        assert predicate.right_source == {"value": 10, "dataType": "Decimal"}

    def test_operator_object(self):
        predicate = create_predicate({"freight": {"gt": 100}})
        assert predicate.op.key == "gt"

    def test_multiple_keys_are_anded(self):
        predicate = create_predicate({"freight": {"gt": 100}, "shipCity": "London"})

        assert isinstance(predicate, LogicalNode)
        assert predicate.op.key == "and"
        assert len(predicate.children) == 2

    def test_multiple_operators_are_anded(self):
        predicate = create_predicate({"freight": {"gt": 10, "lt": 100}})

        assert isinstance(predicate, LogicalNode)
        assert [child.op.key for child in predicate.children] == ["gt", "lt"]

    def test_operator_with_wrapper_value(self):
        predicate = create_predicate({"freight": {"ge": {"value": 10, "dataType": "Decimal"}}})
        assert predicate.op.key == "ge"

    def test_logical_keys(self):
        predicate = create_predicate({"||": [{"freight": 1}, {"freight": 2}]})

        assert isinstance(predicate, LogicalNode)
        assert predicate.op.key == "or"

    def test_unary_key(self):
        predicate = create_predicate({"not": {"freight": {"gt": 100}}})

        assert isinstance(predicate, UnaryNode)
        assert isinstance(predicate.operand, ComparisonNode)

    def test_quantifier_key(self):
        predicate = create_predicate({"orderDetails": {"some": {"quantity": {"gt": 5}}}})

        assert isinstance(predicate, QuantifiedNode)
        assert predicate.op.key == "any"

    def test_array_value_raises(self):
        with pytest.raises(PredicateConstructionError, match="after the phrase: freight"):
            create_predicate({"freight": [1, 2]})

    def test_unknown_operator_raises(self):
        with pytest.raises(PredicateConstructionError, match="'near'"):
            create_predicate({"freight": {"near": 5}})

    def test_predicate_value_raises(self):
        with pytest.raises(PredicateConstructionError):
            create_predicate({"freight": create_predicate({"freight": 5})})


class TestComposition:
    """Test and / or / not composition."""

    def setup_method(self):
        self.first = create_predicate({"freight": {"gt": 100}})
        self.second = create_predicate({"shipCity": "London"})

    def test_and_of_nothing(self):
        assert and_() is None
        assert and_(None, None) is None
        assert or_([]) is None

    def test_and_of_one(self):
        """Test a single predicate is returned unwrapped."""
        assert and_(self.first) is self.first
        assert or_(None, self.first) is self.first

    def test_and_of_many(self):
        predicate = and_(self.first, None, self.second)

        assert isinstance(predicate, LogicalNode)
        assert predicate.children == [self.first, self.second]

    def test_list_argument(self):
        predicate = or_([self.first, self.second])

        assert predicate.op.key == "or"
        assert len(predicate.children) == 2

    def test_not(self):
        predicate = not_(self.first)

        assert isinstance(predicate, UnaryNode)
        assert predicate.operand is self.first

    def test_methods(self):
        assert self.first.and_(self.second).op.key == "and"
        assert self.first.or_(self.second).op.key == "or"
        assert self.first.not_().operand is self.first

    def test_method_with_tuple_form(self):
        """Test methods accept an inline tuple form."""
        predicate = self.first.and_("shipCity", "startswith", "L")

        assert isinstance(predicate, LogicalNode)
        assert predicate.children[0] is self.first
        assert predicate.children[1].op.key == "startswith"

    def test_method_with_passthrough_strings(self):
        """Test three strings without an operator in second place are separate filters."""
        predicate = self.first.and_("Freight gt 100", "ShipCity eq 'London'", "OrderID lt 10")

        assert isinstance(predicate, LogicalNode)
        assert len(predicate.children) == 4
        assert all(isinstance(child, PassthroughNode) for child in predicate.children[1:])

    def test_method_ignores_none(self):
        assert self.first.and_(None) is self.first

    def test_method_with_raw_inputs(self):
        predicate = self.first.or_({"shipCity": "London"}, ["freight", "lt", 5])
        assert len(predicate.children) == 3
