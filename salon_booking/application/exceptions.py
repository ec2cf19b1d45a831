class BackendError(RuntimeError):
    """Raised when the data backend rejects a request or is unreachable."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class BackendNotConfiguredError(BackendError):
    """Raised when Supabase credentials are missing."""
    pass


class MissingRpcError(BackendError):
    """Raised when a remote procedure does not exist in the database."""
    pass


class SlotUnavailableError(RuntimeError):
    """Raised when a slot is taken, including when the backend rejects an insert after a local check passed."""
    pass


class BookingNotFoundError(LookupError):
    pass


class AuthenticationError(PermissionError):
    """Raised when a request carries no valid session."""
    pass


class PermissionDeniedError(PermissionError):
    pass


class InvalidStatusTransitionError(ValueError):
    pass


class PaymentConflictError(RuntimeError):
    """Raised when a deposit is already paid or the booking can no longer be paid."""
    pass


class PaymentNotConfiguredError(RuntimeError):
    pass


class PaymentProviderError(RuntimeError):
    """Raised when Stripe returns an error response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WebhookVerificationError(ValueError):
    pass


class NotificationDeliveryError(RuntimeError):
    """Raised when an email or SMS provider fails."""
    pass


class DraftNotFoundError(LookupError):
    pass
