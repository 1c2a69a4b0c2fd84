"""Application error taxonomy.

Every error raised by services and guards derives from ``AppError`` and is
turned into the JSON envelope ``{"detail": ..., "error": ...}`` by the
handlers registered in ``smart_restaurant.main``.
"""

from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message, "error": self.code}
        body.update(self.extra)
        return body


# ============== Capability token ==============

class TokenMissing(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "token_missing"
    default_message = "QR token is required"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "QR-Token"}


class TokenInvalid(AppError):
    """A presented QR token cannot be trusted.

    Subclasses record why, for logs. Clients always see the same message.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "token_invalid"
    default_message = "This QR code is no longer valid"
    kind = "invalid"

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or self.kind
        super().__init__(self.default_message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "QR-Token"}


class TokenMalformed(TokenInvalid):
    kind = "malformed"


class TokenSignatureInvalid(TokenInvalid):
    kind = "signature_invalid"


class TokenExpired(TokenInvalid):
    kind = "expired"


# ============== Staff authentication ==============

class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
    default_message = "Not authenticated"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Not allowed"


# ============== Request / scope ==============

class ScopeResolutionFailure(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "restaurant_required"
    default_message = "Restaurant is required"


class QueryValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_message = "Invalid request parameters"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    default_message = "Bad request"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Resource already exists"


class RateLimited(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "rate_limited"
    default_message = "Too many requests"


# ============== Upstream ==============

class UpstreamFailure(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "upstream_failure"
    default_message = "Database operation failed"


class UpstreamScoringFailure(UpstreamFailure):
    code = "scoring_failure"
    default_message = "Could not compute menu popularity"
