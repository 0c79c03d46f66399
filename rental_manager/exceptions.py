"""
Custom exception classes for the rental-order web app.

These exceptions provide precise error types that controllers can catch
to return friendly messages instead of generic 500 errors.
"""


class BackendError(Exception):
    """Raised when the hosted backend reports a failure for a call."""

    def __init__(self, message: str = "Error: backend request failed", code=None) -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class InvalidRoleError(Exception):
    """Raised when a role value is not one of the known roles."""

    def __init__(self, message: str = "Invalid role") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class RentalValidationError(Exception):
    """Raised when a submitted rental request fails validation."""

    def __init__(self, message: str = "Error: invalid rental request", errors=None) -> None:
        self.message = message
        self.errors = errors or {}
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class RentalNotFoundError(Exception):
    """Raised when a rental request cannot be found in the backend."""

    def __init__(self, message: str = "Error: rental request not found") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class AuthenticationError(Exception):
    """Raised when sign-in or sign-up is rejected by the auth provider."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class AccessDeniedError(Exception):
    """Raised when an authenticated user may not act on a specific record."""

    def __init__(self, message: str = "You do not have permission to access this resource") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message
