"""
Exceptions raised by the verification lifecycle.

External proof failures (DNS, HTTP) never surface here: they collapse
into a failed check. Webhook delivery failures never surface either.
"""


class VerificationError(Exception):
    """Base class for verification errors that reach the caller."""


class VerificationValidationError(VerificationError, ValueError):
    """Caller input was rejected before any state was created."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def to_detail(self) -> list[dict]:
        return [{"loc": ["body", self.field], "msg": self.message, "type": "value_error"}]


class InvalidVerificationDomain(VerificationValidationError):
    def __init__(self, message: str):
        super().__init__("domain", message)


class InvalidVerificationMethod(VerificationValidationError):
    def __init__(self, message: str):
        super().__init__("method", message)


class VerificationNotFound(VerificationError):
    """Unknown id, or a record that lives outside the caller's scope."""


class VerificationPersistenceError(VerificationError):
    """The write did not commit; the record must not be reported as changed."""
