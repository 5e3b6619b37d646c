class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class LoadError(DomainError):
    """Raised when the roster, schedule or attendance fetch fails."""


class StoreError(DomainError):
    """Raised by store implementations when a write cannot be applied."""
