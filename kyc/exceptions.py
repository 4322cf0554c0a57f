"""
Verification errors.

Every error carries the HTTP status the API layer answers with, a short
machine-readable code and optional details that end up in the JSON error body:

- ValidationError: malformed role, bad evidence section, missing rejection reason
- AuthorizationError: trust level below the requirement, or non-admin reviewer
- NotFoundError: unknown verification id
- ConflictError: duplicate (user, role) record that could not become an update
- CryptoError: decryption or authentication failure
- UnavailableError: database unreachable; safe to retry
"""


class KYCError(Exception):
    status_code = 500
    code = "kyc_error"
    retryable = False

    def __init__(self, message: str = None, **details):
        self.message = message or self.__class__.__doc__ or self.code
        self.details = details
        super().__init__(self.message)

    def as_dict(self):
        data = {"code": self.code, "message": self.message}
        data.update(self.details)
        if self.retryable:
            data["retryable"] = True
        return data


class ValidationError(KYCError):
    """Invalid verification input."""

    status_code = 400
    code = "validation_error"


class AuthorizationError(KYCError):
    """Not allowed to perform this action."""

    status_code = 403
    code = "authorization_error"


class NotFoundError(KYCError):
    """Verification not found."""

    status_code = 404
    code = "not_found"


class ConflictError(KYCError):
    """A verification for this user and role already exists."""

    status_code = 409
    code = "conflict"


class CryptoError(KYCError):
    """Failed to decrypt data. Invalid encrypted text or key."""

    status_code = 500
    code = "crypto_error"


class UnavailableError(KYCError):
    """Database connection is not available."""

    status_code = 503
    code = "unavailable"
    retryable = True
