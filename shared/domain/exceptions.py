"""
Domain Exceptions

Error taxonomy shared by the booking and payment contexts.

- ValidationError: bad input, raised before anything is persisted
- PersistenceError: the storage gateway failed to read or write
- PaymentGatewayError: the payment processor declined or failed
- NotFoundError: an unknown identifier was referenced
"""


class DomainError(Exception):
    """Base class for all engine errors"""


class ValidationError(DomainError, ValueError):
    """
    Input rejected by a domain rule

    `errors` maps field names to human readable messages when
    the failure concerns specific form fields.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None):
        super().__init__(message)
        self.errors = errors or {}


class InvalidRangeError(ValidationError):
    """End date precedes start date"""


class InvalidStatusTransitionError(ValidationError):
    """Raised when a booking status transition is not allowed"""

    def __init__(self, current: str, target: str):
        super().__init__(f"Invalid booking status transition: {current} -> {target}")
        self.current = current
        self.target = target


class DuplicateSettlementError(ValidationError):
    """A settlement for the booking is already running or has completed"""


class PersistenceError(DomainError):
    """Storage failure. The operation may be retried safely."""


class PaymentGatewayError(DomainError):
    """Settlement failed at the payment processor"""

    def __init__(self, message: str, code: str = 'processing_error'):
        super().__init__(message)
        self.code = code


class NotFoundError(DomainError, LookupError):
    """Referenced object does not exist"""


class PermissionDeniedError(DomainError):
    """Caller is not allowed to perform the operation"""


class InvalidStepError(DomainError):
    """Payment flow step cannot be entered from the current state"""
