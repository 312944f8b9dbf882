"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Per-line-item snapshot problems are NOT exceptions: the rollup downgrades
them to warnings.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class SignatureInputError(ValidationError):
    """Signature input is not a plain JSON value."""


class ConflictError(DomainException):
    """The requested mutation conflicts with the current state.

    Carries a stable machine-readable ``code`` and the ``context`` of the
    rejected operation.  Callers map it to an HTTP 409 response.
    """

    def __init__(self, message: str, *, code: str, context: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context
        self.status_code = 409
