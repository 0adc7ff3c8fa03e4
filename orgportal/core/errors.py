"""Error taxonomy shared by the auth core and the HTTP layer.

Every error carries the HTTP status it surfaces as and a client-safe
``message``. ``reason`` is for internal logs only and is never sent to the
client.
"""

from typing import Optional


class PortalError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, reason: Optional[str] = None):
        self.message = message or self.message
        self.reason = reason
        super().__init__(self.message)


class CredentialError(PortalError):
    """The hashing subsystem failed. Fatal for the request."""


class AuthError(PortalError):
    status_code = 401
    message = "Could not validate credentials"


class Unauthenticated(AuthError):
    message = "Authentication required"


class InvalidCredentials(AuthError):
    message = "Invalid credentials"


class ExpiredToken(AuthError):
    message = "Token has expired"


class MalformedToken(AuthError):
    pass


class RevokedToken(AuthError):
    message = "Token has been revoked"


class AccessError(PortalError):
    status_code = 403
    message = "Not authorized to perform this action"


class InsufficientRole(AccessError):
    pass


class AccountInactive(AccessError):
    message = "Account is inactive"


class ValidationError(PortalError):
    status_code = 400
    message = "Invalid input"


class DuplicateEntry(ValidationError):
    message = "Email already registered"


class NotFound(PortalError):
    status_code = 404
    message = "Not found"
