"""Domain error kinds.

Every error the core can raise derives from TagBlazeError and carries a
stable machine-readable code plus the HTTP status the transport maps it to.
One exception handler in main.py renders them all as
{"error": <code>, "detail": <message>}.

Learn: Services raise these; routes never translate them by hand. Storage
driver errors are wrapped in StorageFailure with a generic message so the
underlying driver text never reaches a client.
"""


class TagBlazeError(Exception):
    """Base class for all TagBlaze domain errors."""

    error_code: str = "error"
    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(TagBlazeError):
    """Malformed input. Recoverable — the client can retry with corrected input."""

    error_code = "validation_error"
    status_code = 422


class DuplicateEmail(TagBlazeError):
    error_code = "duplicate_email"
    status_code = 409


class DuplicateName(TagBlazeError):
    error_code = "duplicate_name"
    status_code = 409


class NotFound(TagBlazeError):
    error_code = "not_found"
    status_code = 404


class InvalidCredentials(TagBlazeError):
    """Unknown email or wrong password. Same shape for both."""

    error_code = "invalid_credentials"
    status_code = 401

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class Unauthorized(TagBlazeError):
    """Missing or unparseable bearer credentials."""

    error_code = "unauthorized"
    status_code = 401


class Forbidden(TagBlazeError):
    """Valid identity, insufficient role."""

    error_code = "forbidden"
    status_code = 403


class TokenExpired(TagBlazeError):
    error_code = "token_expired"
    status_code = 401


class TokenInvalid(TagBlazeError):
    error_code = "token_invalid"
    status_code = 401


class UserNotFound(TokenInvalid):
    """Token subject no longer resolves. Surfaces to callers as token_invalid."""


class StorageFailure(TagBlazeError):
    """Store unavailable or transaction aborted. Raised only after rollback."""

    error_code = "storage_failure"
    status_code = 503

    def __init__(self, message: str = "Storage temporarily unavailable") -> None:
        super().__init__(message)


# Errors that should prompt the client to re-authenticate.
AUTH_CHALLENGE_ERRORS = (Unauthorized, TokenExpired, TokenInvalid)
