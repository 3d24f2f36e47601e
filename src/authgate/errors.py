from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails.

    The message is always the same so callers cannot tell an expired OTP
    from a revoked session or a banned account.
    """

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class ConflictError(UserError):
    """Raised when a write collides with an existing unique value."""


class OtpCooldownError(UserError):
    """Raised when an OTP is requested while a previous one is still live."""

    def __init__(self, ttl: int) -> None:
        super().__init__(f"OTP already sent, retry in {ttl} seconds")
        self.ttl = ttl


class TransientStoreError(Exception):
    """The key-value store is unreachable or timed out. Retryable, never an authentication result."""


class DeliveryError(Exception):
    """The OTP could not be handed to the SMS gateway."""


class ConfigurationError(Exception):
    """Fatal startup misconfiguration. The process must not serve traffic."""
