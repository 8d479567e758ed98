# backend/services/errors.py
"""Domain errors raised by the service layer.

Services only describe what went wrong; ``main.py`` decides how each error
is presented to HTTP clients.
"""


class DomainError(Exception):
    code = "domain_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(DomainError):
    code = "not_found"


class ValidationFailed(DomainError):
    code = "validation_failed"


class InsufficientStock(ValidationFailed):
    code = "insufficient_stock"


class InvalidTransition(ValidationFailed):
    code = "invalid_transition"


class ConflictError(DomainError):
    code = "conflict"
