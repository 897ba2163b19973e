# pos/services/exceptions.py

"""
POS DOMAIN ERRORS

Every error carries:
- code: stable machine code used in the API error envelope
- http_status: status the API layer answers with
- step: name of the pipeline step that failed (None for local checks)

Guard and validation errors are raised before anything is written.
DependencyFailure and ConsistencyTimeout abort the surrounding transaction.
"""


class POSError(Exception):
    code = "POS_ERROR"
    http_status = 400

    def __init__(self, message: str, *, step: str | None = None):
        super().__init__(message)
        self.message = message
        self.step = step


class CartNotFoundError(POSError):
    code = "NOT_FOUND"
    http_status = 404


class GuardViolation(POSError):
    code = "GUARD_VIOLATION"
    http_status = 409


class InvalidCartTransitionError(GuardViolation):
    pass


class POSValidationError(POSError):
    code = "VALIDATION_ERROR"
    http_status = 400


class PaymentValidationError(POSValidationError):
    pass


class DependencyFailure(POSError):
    code = "DEPENDENCY_FAILURE"
    http_status = 502


class ConsistencyTimeout(POSError):
    code = "CONSISTENCY_TIMEOUT"
    http_status = 504


class InvoiceNotFoundError(POSError):
    code = "NOT_FOUND"
    http_status = 404
