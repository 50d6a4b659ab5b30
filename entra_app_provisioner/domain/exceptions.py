"""Domain exceptions."""


class DomainError(Exception):
    """Base exception for domain errors."""


class InvalidPermissionError(DomainError, ValueError):
    """Raised when a permission identifier cannot be parsed."""


class InvalidRegistrationSpecError(DomainError, ValueError):
    """Raised when a registration spec is invalid."""
