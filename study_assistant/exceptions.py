"""Exceptions raised by the study material pipeline.

The sampler and response parser never raise; only the document loader
and the Gemini call have caller-visible failures.
"""


class StudyAssistantError(Exception):
    """Base class for study assistant errors."""


class DocumentUnreadableError(StudyAssistantError):
    """The uploaded PDF could not be opened or its pages read."""


class AIServiceError(StudyAssistantError):
    """The Gemini call failed or returned no text.

    Attributes:
        status_code: HTTP status reported by the API, when known
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(AIServiceError):
    """Gemini rejected the request with 429 Too Many Requests."""

    def __init__(self, message: str = "Rate limit exceeded. Please wait a moment and try again."):
        super().__init__(message, status_code=429)
