"""
Domain error to transport error mapping.

Translates any raised exception into a uniform ErrorBody: an HTTP status,
a machine-readable error code, a client-safe message and the list of
failing fields. Unknown exceptions collapse to a generic 500 so internal
details never reach the client.
"""

from dataclasses import dataclass, field

from app.domain.management.errors import (
    BusinessRuleError,
    DuplicateResourceError,
    EntityNotFoundError,
    FieldError,
    MalformedRequestError,
    ReferentialConflictError,
    ValidationFailedError,
)

HTTP_400 = 400
HTTP_401 = 401
HTTP_404 = 404
HTTP_405 = 405
HTTP_409 = 409
HTTP_413 = 413
HTTP_422 = 422
HTTP_429 = 429
HTTP_500 = 500

NOT_FOUND = "NOT_FOUND"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
VALIDATION_FAILED = "VALIDATION_FAILED"
MALFORMED_REQUEST = "MALFORMED_REQUEST"
REFERENTIAL_CONFLICT = "REFERENTIAL_CONFLICT"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
UNAUTHORIZED = "UNAUTHORIZED"
PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
RATE_LIMITED = "RATE_LIMITED"
INTERNAL_ERROR = "INTERNAL_ERROR"

GENERIC_INTERNAL_MESSAGE = "An unexpected error occurred. Please try again later."


@dataclass(frozen=True)
class ErrorBody:
    """Transport-neutral error record."""

    status: int
    error_code: str
    message: str
    field_errors: list[FieldError] = field(default_factory=list)

    def to_dict(self, path: str | None = None) -> dict:
        body: dict = {
            "status": self.status,
            "error_code": self.error_code,
            "message": self.message,
            "field_errors": [
                {"field": e.field, "code": e.code, "message": e.message}
                for e in self.field_errors
            ],
        }
        if path:
            body["path"] = path
        return body


def map_error(exc: Exception) -> ErrorBody:
    """Map a raised exception to its ErrorBody.

    Args:
        exc: Any exception that escaped a use case.

    Returns:
        The uniform error record for the transport layer.
    """
    if isinstance(exc, EntityNotFoundError):
        return ErrorBody(HTTP_404, NOT_FOUND, exc.message)
    if isinstance(exc, ValidationFailedError):
        return ErrorBody(
            HTTP_400,
            VALIDATION_FAILED,
            "Input validation failed. Check 'field_errors' for details.",
            exc.field_errors,
        )
    if isinstance(exc, MalformedRequestError):
        return ErrorBody(HTTP_400, MALFORMED_REQUEST, exc.message)
    if isinstance(exc, ReferentialConflictError):
        return ErrorBody(HTTP_409, REFERENTIAL_CONFLICT, exc.message)
    if isinstance(exc, DuplicateResourceError):
        return ErrorBody(HTTP_409, DUPLICATE_RESOURCE, exc.message)
    if isinstance(exc, BusinessRuleError):
        return ErrorBody(HTTP_422, BUSINESS_RULE_VIOLATION, exc.message)
    return ErrorBody(HTTP_500, INTERNAL_ERROR, GENERIC_INTERNAL_MESSAGE)


def malformed_request(field_errors: list[FieldError]) -> ErrorBody:
    """Build the 400 body for a request the transport could not parse."""
    return ErrorBody(
        HTTP_400,
        MALFORMED_REQUEST,
        "Request body is malformed or has values of the wrong type.",
        field_errors,
    )
