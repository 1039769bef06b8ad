"""
Application exception hierarchy.

Services raise these; the handlers registered in ``hypervision.main`` turn
them into JSON responses. ``message`` is safe to return to the client,
``context`` is only logged.

    HypervisionError (base)
    ├── AuthenticationError     → 401 unauthenticated
    ├── AuthorizationError      → 403 forbidden
    ├── InvalidRequestError     → 400 invalid_request
    ├── NotFoundError           → 404 not_found
    ├── ExpiredError            → 410 expired
    ├── InvalidCredentialError  → 401 invalid_credential
    ├── GenerationError         → 500 internal_error
    ├── HashingError            → 500 internal_error
    └── PersistenceError        → 500 internal_error
"""

from typing import Any, Dict, Optional


class HypervisionError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500
    error_code: str = "internal_error"
    internal: bool = True

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(HypervisionError):
    """Bearer token missing, invalid or expired."""

    status_code = 401
    error_code = "unauthenticated"
    internal = False

    def __init__(self, message: str = "Invalid or expired token", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class AuthorizationError(HypervisionError):
    """Caller lacks manage-authority over the resource."""

    status_code = 403
    error_code = "forbidden"
    internal = False

    def __init__(self, message: str = "not authorized", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class NotFoundError(HypervisionError):
    """Link or gated resource does not exist."""

    status_code = 404
    error_code = "not_found"
    internal = False

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource


class InvalidRequestError(HypervisionError):
    """Argument outside the range the service accepts."""

    status_code = 400
    error_code = "invalid_request"
    internal = False

    def __init__(self, message: str = "invalid request", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class ExpiredError(HypervisionError):
    """
    Link is past its expiration.

    Kept apart from NotFoundError and InvalidCredentialError so holders can
    tell they need a fresh link rather than a different password.
    """

    status_code = 410
    error_code = "expired"
    internal = False

    def __init__(self, message: str = "link has expired", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class InvalidCredentialError(HypervisionError):
    """Presented secret does not match the stored hash."""

    status_code = 401
    error_code = "invalid_credential"
    internal = False

    def __init__(self, message: str = "invalid password", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class GenerationError(HypervisionError):
    """Entropy source unavailable while generating a secret."""

    def __init__(self, message: str = "failed to generate password", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class HashingError(HypervisionError):
    """Hashing primitive failed."""

    def __init__(self, message: str = "failed to hash password", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class PersistenceError(HypervisionError):
    """Store read/write failed or returned a malformed or empty result."""

    def __init__(self, message: str = "storage operation failed", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)
