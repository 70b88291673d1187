"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class MulticutError(Exception):
    """Base error for all export pipeline errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class ValidationError(MulticutError):
    """Malformed job descriptor or request payload."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class PreconditionError(MulticutError):
    """A referenced resource (e.g. a source file) is missing at submission time."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="precondition", details=details)


class NotFoundError(MulticutError):
    """Job, status record or output file does not exist."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="store", details=details)


class ConflictError(MulticutError):
    """Request clashes with another active job."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="store", details=details)


class ProcessingError(MulticutError):
    """Errors while running an export job."""

    def __init__(self, message: str, component: str = "pipeline", details: dict | None = None):
        super().__init__(message, component=component, details=details)


class SourceReferenceError(ProcessingError):
    """A segment points at a source index that does not exist."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="pipeline", details=details)


class JobCancelledError(ProcessingError):
    """The job directory was removed while the job was being processed."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="pipeline", details=details)


class TranscodeError(MulticutError):
    """FFmpeg failed to start, exited non-zero or timed out."""

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        stderr_tail: str = "",
        details: dict | None = None,
    ):
        details = dict(details or {})
        details.setdefault("returncode", returncode)
        details.setdefault("stderr", stderr_tail)
        super().__init__(message, component="transcode", details=details)
        self.returncode = returncode
        self.stderr_tail = stderr_tail


class ErrorResponse(BaseModel):
    """Standardized error response for API."""

    error_type: str = Field(..., description="Error category")
    component: str = Field(default="", description="Component that raised the error")
    message: str = Field(..., description="Human-readable error message")
    error: str = Field(default="", description="Same as message, read by the editor")
    details: dict = Field(default_factory=dict)
    actionable_guidance: str = Field(default="", description="Suggested user action")
    retry_possible: bool = Field(default=False)

    @classmethod
    def from_exception(
        cls, exc: MulticutError, guidance: str = "", retry: bool = False
    ) -> "ErrorResponse":
        return cls(
            error_type=type(exc).__name__,
            component=exc.component,
            message=exc.message,
            error=exc.message,
            details=exc.details,
            actionable_guidance=guidance,
            retry_possible=retry,
        )
