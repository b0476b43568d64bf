"""
Exceptions

Exception classes shared by the client, codec and pipeline modules.
Kept in their own module to avoid circular imports between them.
"""


class TranslationError(Exception):
    """Translation error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class DocumentError(TranslationError):
    """Source document could not be read or parsed."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message, code="document_error", details={"path": path} if path else None)
        self.path = path


class ServiceError(TranslationError):
    """Error reported by (or while reaching) the translation service."""

    def __init__(self, message: str, code: str = None, status_code: int = None, details: dict = None):
        super().__init__(message, code=code, details=details)
        self.status_code = status_code


class TransientServiceError(ServiceError):
    """Rate limit, 5xx, timeout or network failure; worth retrying."""

    def __init__(self, message: str, status_code: int = None, retry_after: float = None):
        super().__init__(message, code="transient", status_code=status_code)
        self.retry_after = retry_after


class PermanentServiceError(ServiceError):
    """Non-retriable service response (bad request, authentication, ...)."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message, code="permanent", status_code=status_code)


class RetriesExhaustedError(ServiceError):
    """Transient failures persisted through the whole retry budget."""

    def __init__(self, message: str, attempts: int, status_code: int = None):
        super().__init__(message, code="retries_exhausted", status_code=status_code,
                         details={"attempts": attempts})
        self.attempts = attempts


class ResponseFormatError(ServiceError):
    """Service answered with a payload that does not line up with the request."""

    def __init__(self, message: str):
        super().__init__(message, code="bad_response")


class PipelineCancelled(TranslationError):
    """Raised inside a pair run when cancellation was requested."""

    def __init__(self, message: str = "Translation cancelled"):
        super().__init__(message, code="cancelled")


class PipelineError(TranslationError):
    """A (file, language) pair failed; carries the context and the cause."""

    def __init__(self, source_file: str, language: str, cause: Exception):
        super().__init__(
            f"Failed to translate {source_file} to {language}: {cause}",
            code="pipeline_error",
            details={"file": source_file, "language": language, "error": str(cause)},
        )
        self.source_file = source_file
        self.language = language
        self.cause = cause
