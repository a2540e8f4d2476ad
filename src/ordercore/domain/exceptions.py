"""Domain-level exceptions.

Every rejection the core can produce is a subclass of DomainException so
callers can catch them uniformly and turn them into user-facing messages.
All of them are raised before any write becomes visible.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A required field is missing or a business rule was violated."""


class NotFoundError(DomainException):
    """A referenced entity does not exist, or is not visible to the caller."""


class UnavailableError(DomainException):
    """The entity exists but cannot be purchased right now."""


class ConflictError(DomainException):
    """The request collides with an existing record."""


class AuthorizationError(DomainException):
    """The actor may see the row but lacks rights to mutate it."""


class IntegrityError(DomainException):
    """An exclusivity invariant (user vs guest, current vs legacy) would break."""


class ConcurrencyError(DomainException):
    """The storage layer aborted the transaction; safe to retry."""


# --- Checkout specialisations -------------------------------------------------


class EmptyCartError(ValidationError):
    """Checkout was attempted with no line items."""


class InvalidLineItem(ValidationError):
    """A cart line has a bad quantity or a malformed item reference."""


class ItemNotFound(NotFoundError):
    """The item reference does not resolve in its own catalog table."""


class ItemUnavailable(UnavailableError):
    """The catalog item is switched off or carries no sellable price."""
