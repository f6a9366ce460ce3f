class BookingClientError(RuntimeError):
    """Base class for every recoverable failure surfaced by the client core."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(BookingClientError):
    """Raised when input is malformed, before or after a request (400/422)."""
    pass


class AuthError(BookingClientError):
    """Raised when the credential is missing, invalid or lacks the required role."""
    pass


class NotFoundError(BookingClientError):
    """Raised when an id does not resolve on the server."""
    pass


class InvalidTransitionError(BookingClientError):
    """Raised when a status change is rejected by policy, locally or by the backend."""
    pass


class NetworkError(BookingClientError):
    """Raised on transport failures, timeouts and unexpected upstream responses."""
    pass
