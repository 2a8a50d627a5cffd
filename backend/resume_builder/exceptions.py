"""
Application exceptions.

Every error raised on purpose by the services derives from ResumeBuilderError,
which carries an HTTP status code so main.py can turn it into a
``{"success": false, "message": ...}`` response.
"""
from typing import Any, Optional


class ResumeBuilderError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Document extraction
# =============================================================================


class DocumentExtractionError(ResumeBuilderError):
    """The uploaded document could not be turned into text."""

    status_code = 400


class UnsupportedFileTypeError(DocumentExtractionError):
    """File type is not one of PDF, DOC, DOCX or plain text."""

    def __init__(self, content_type: str, filename: str = "") -> None:
        message = f"Invalid file type: {content_type}. Only PDF, DOC, DOCX, and TXT files are supported."
        super().__init__(message, {"content_type": content_type, "filename": filename})


class FileTooLargeError(DocumentExtractionError):
    """File exceeds the configured upload limit."""

    def __init__(self, file_size: int, max_size: int) -> None:
        message = (
            f"File size ({file_size / 1024 / 1024:.2f}MB) exceeds maximum "
            f"allowed size of {max_size / 1024 / 1024:.0f}MB."
        )
        super().__init__(message, {"file_size": file_size, "max_size": max_size})


class FileTooSmallError(DocumentExtractionError):
    """File is below the minimum plausible size."""

    def __init__(self, file_size: int, min_size: int) -> None:
        super().__init__(
            "File appears to be empty or too small.",
            {"file_size": file_size, "min_size": min_size},
        )


# =============================================================================
# AI provider
# =============================================================================


class AIServiceError(ResumeBuilderError):
    """The AI provider call failed after retries."""

    status_code = 503

    def __init__(self, message: str, error_type: str = "unknown", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.error_type = error_type


class AIServiceUnavailableError(AIServiceError):
    """No API key configured."""

    def __init__(self, message: str = "AI service not configured. Please set GEMINI_API_KEY.") -> None:
        super().__init__(message, error_type="not_configured")


class AIResponseParseError(AIServiceError):
    """The model answered, but not with a usable JSON object."""

    status_code = 502

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message, error_type="malformed_response", details={"raw_response": raw_response[:500]})
