"""Domain services for filterexpr."""

from filterexpr.domain.services.record_accessor import get_property, get_property_path_value

__all__ = ["get_property", "get_property_path_value"]
