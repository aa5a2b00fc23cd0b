"""
Artwalls - Error taxonomy.

Every error carries a short user-facing message and whether retrying the same
operation can succeed. Pure functions raise ValidationError synchronously;
I/O failures surface as TransportError.
"""


class ArtwallsError(Exception):
    """Base class for all Artwalls errors."""

    retryable: bool = False

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__doc__ or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(ArtwallsError):
    """Some of the information provided is not valid."""


class InvalidTier(ValidationError):
    """That plan does not exist."""


class NotFound(ArtwallsError):
    """We couldn't find that record."""


class Unauthenticated(ArtwallsError):
    """Please sign in again to continue."""


class TransportError(ArtwallsError):
    """We couldn't reach the server. Please try again."""

    retryable = True


class CheckoutTimeout(TransportError):
    """Checkout is taking too long to respond. Please try again."""


class PreconditionFailed(ArtwallsError):
    """Finish the remaining onboarding requirements first."""

    def __init__(self, message: str = "", missing_gates: list[str] | None = None):
        self.missing_gates = list(missing_gates or [])
        super().__init__(message)


class StaleStateError(ArtwallsError):
    """Your onboarding progress changed in another window. Reload to continue."""


class OperationInProgress(ArtwallsError):
    """Still saving your last change. Please try again in a moment."""

    retryable = True
