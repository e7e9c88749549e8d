"""Pytest configuration for all tests."""

import pytest
import structlog

from filterexpr.core import datatypes
from filterexpr.core.config import get_settings
from filterexpr.domain.entities.entity_type import (
    DataProperty,
    EntityType,
    NavigationProperty,
)


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reload settings and reset logging around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


def build_order_schema() -> EntityType:
    """Order -> OrderDetail (many) and Order -> Customer (one)."""
    customer = EntityType(name="Customer")
    order_detail = EntityType(name="OrderDetail")
    order = EntityType(name="Order")

    (
        customer.add_property(DataProperty("customerID", datatypes.GUID))
        .add_property(DataProperty("companyName", datatypes.STRING))
        .add_property(DataProperty("city", datatypes.STRING))
        .add_property(NavigationProperty("orders", order))
    )
    (
        order_detail.add_property(DataProperty("orderID", datatypes.INT32))
        .add_property(DataProperty("productName", datatypes.STRING))
        .add_property(DataProperty("quantity", datatypes.INT16))
        .add_property(DataProperty("unitPrice", datatypes.DECIMAL))
        .add_property(DataProperty("discount", datatypes.SINGLE))
    )
    (
        order.add_property(DataProperty("orderID", datatypes.INT32))
        .add_property(DataProperty("freight", datatypes.DECIMAL))
        .add_property(DataProperty("shipCity", datatypes.STRING))
        .add_property(DataProperty("shipCountry", datatypes.STRING))
        .add_property(DataProperty("orderDate", datatypes.DATE_TIME))
        .add_property(DataProperty("customerID", datatypes.GUID))
        .add_property(NavigationProperty("customer", customer, is_scalar=True))
        .add_property(NavigationProperty("orderDetails", order_detail))
    )
    return order


@pytest.fixture
def order_type() -> EntityType:
    """Order schema with nested OrderDetail and Customer types."""
    return build_order_schema()


@pytest.fixture
def order_detail_type(order_type: EntityType) -> EntityType:
    return order_type.properties["orderDetails"].entity_type


@pytest.fixture
def customer_type(order_type: EntityType) -> EntityType:
    return order_type.properties["customer"].entity_type


@pytest.fixture
def anonymous_type() -> EntityType:
    """Anonymous schema; behaves like no schema at all."""
    return EntityType(name="Anonymous", is_anonymous=True)


@pytest.fixture
def order_schema_document() -> dict:
    """JSON-style document describing the Order schema."""
    return {
        "name": "Order",
        "namingConvention": "camel_case",
        "properties": {
            "orderID": "Int32",
            "freight": "Decimal",
            "shipCity": "String",
            "shipCountry": "String",
            "orderDate": "DateTime",
            "customer": {
                "navigation": {
                    "name": "Customer",
                    "properties": {
                        "companyName": "String",
                        "city": "String",
                        "orders": {"navigation": "Order"},
                    },
                },
                "isScalar": True,
            },
            "orderDetails": {
                "navigation": {
                    "name": "OrderDetail",
                    "properties": {
                        "productName": "String",
                        "quantity": "Int16",
                        "unitPrice": "Decimal",
                    },
                },
            },
        },
    }
