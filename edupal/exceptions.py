"""
Error taxonomy for the study and payment flows

Every error carries the HTTP status it maps to, so routers can simply raise
and the handler in main renders a consistent envelope.
"""


class EduPalError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(EduPalError):
    status_code = 400
    error_code = "invalid_request"


class AuthenticationError(EduPalError):
    status_code = 401
    error_code = "unauthorized"


class PaymentRequiredError(EduPalError):
    status_code = 403
    error_code = "payment_required"


class NotFoundError(EduPalError):
    status_code = 404
    error_code = "not_found"


class UnsupportedFormatError(EduPalError):
    status_code = 400
    error_code = "unsupported_format"


class InsufficientContentError(EduPalError):
    status_code = 400
    error_code = "insufficient_content"


class DocumentParseError(EduPalError):
    """PDF/DOCX decoder failed on a corrupt or unsupported document"""

    status_code = 500
    error_code = "document_parse_failed"


class StorageError(EduPalError):
    status_code = 500
    error_code = "storage_error"


class ServiceUnavailableError(EduPalError):
    status_code = 503
    error_code = "service_unavailable"


class UpstreamServiceError(EduPalError):
    """The model or the payment gateway failed"""

    status_code = 500
    error_code = "upstream_error"


class InvalidModelOutputError(UpstreamServiceError):
    error_code = "invalid_ai_output"


class PersistenceError(EduPalError):
    status_code = 500
    error_code = "persistence_error"
