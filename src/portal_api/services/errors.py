"""Domain errors raised by the service layer.

Each error carries the HTTP status and machine-readable code the API
returns for it; ``main.create_app`` registers a single handler that
renders them as ``{"detail": ..., "code": ...}``.
"""


class PortalError(ValueError):
    """Base class for expected, client-visible failures."""

    status_code: int = 400
    code: str = "bad_request"
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredentialsError(PortalError):
    code = "missing_credentials"
    default_message = "Email and password are required"


class InvalidCredentialsError(PortalError):
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class EmailNotFoundError(PortalError):
    """Only raised when ``login_reveal_unknown_email`` is enabled."""

    code = "email_not_found"
    default_message = "Email not found"


class NoPasswordHistoryError(PortalError):
    code = "no_password_history"
    default_message = "No password registered for this user"


class WeakPasswordError(PortalError):
    code = "weak_password"
    default_message = "Password does not meet the password policy"


class PasswordReusedError(PortalError):
    code = "password_reused"
    default_message = "Password was used recently; choose a different one"


class InvalidOrExpiredTokenError(PortalError):
    code = "invalid_or_expired_token"
    default_message = "Invalid or expired token"


class DuplicateEmailError(PortalError):
    status_code = 409
    code = "duplicate_email"
    default_message = "User is already registered"


class DuplicateRoleError(PortalError):
    status_code = 409
    code = "duplicate_role"
    default_message = "A role with that name already exists"


class RoleInUseError(PortalError):
    status_code = 409
    code = "role_in_use"
    default_message = "Role cannot be removed"


class UserNotFoundError(PortalError):
    status_code = 404
    code = "user_not_found"
    default_message = "User not found"


class RoleNotFoundError(PortalError):
    status_code = 404
    code = "role_not_found"
    default_message = "Role not found"


class EmailDeliveryError(PortalError):
    status_code = 502
    code = "email_delivery_failed"
    default_message = "Could not send email"
