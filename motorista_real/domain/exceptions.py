"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input rejected before persistence (bad amount, plate, category...)"""

    pass


class InvariantViolationError(DomainException):
    """Operation would break a model invariant; nothing was changed"""

    pass


class NotFoundError(DomainException):
    """Vehicle or transaction does not exist for this user"""

    pass


class NotAuthenticatedError(DomainException):
    """No user is logged in"""

    pass


class AuthProviderError(DomainException):
    """Identity provider returned an error or is unavailable"""

    pass
