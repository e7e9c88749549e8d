"""Exceptions for predicate construction, validation and evaluation."""

class PredicateError(Exception):
    """Base class for all predicate-related errors."""
    pass

class PredicateConstructionError(PredicateError):
    """Raised when an input cannot be turned into an expression tree."""
    pass

class PredicateValidationError(PredicateError):
    """Raised when an expression tree does not validate against a schema."""
    pass

class PredicateEvaluationError(PredicateError):
    """Raised when a predicate cannot be compiled or evaluated locally."""
    pass
