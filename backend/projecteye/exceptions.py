"""Typed domain errors raised by the service layer.

Each error carries a machine-readable ``code`` and the HTTP ``status_code``
the API layer answers with. Services raise on the first violated
precondition, before anything is written.
"""


class ProjectEyeError(Exception):
    """Base class for all domain errors."""

    code = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ProjectEyeError):
    code = "not_found"
    status_code = 404


class ConflictError(ProjectEyeError):
    code = "conflict"
    status_code = 409


class InvalidInputError(ProjectEyeError):
    code = "invalid_input"
    status_code = 400


class PermissionDeniedError(ProjectEyeError):
    code = "forbidden"
    status_code = 403
