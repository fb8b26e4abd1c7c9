"""
Error taxonomy shared by the workflows.

The workflows raise these; api.errors maps them to HTTP responses.
Messages are for logs and debugging, not for end users.
"""


class AppError(Exception):
    """Base class for every error raised by the core."""

    default_message = "application error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(AppError):
    default_message = "invalid input"


class Conflict(AppError):
    default_message = "conflict"


class DuplicateEmail(Conflict):
    default_message = "email already exists"


EmailAlreadyExists = DuplicateEmail


class InvalidCredentials(AppError):
    # Same error for "no such user", "wrong password" and every refresh-token failure
    default_message = "invalid credentials"


class NotFound(AppError):
    default_message = "record not found"


class Unauthorized(AppError):
    default_message = "unauthorized"


class Forbidden(AppError):
    default_message = "permission denied"


class UploadError(AppError):
    default_message = "object storage request failed"


class InternalError(AppError):
    default_message = "internal server error"


class SigningError(InternalError):
    default_message = "unable to sign token"
