"""Typed extraction failures.

Strategies raise these for hard failures; the orchestrator is the only place
they are turned into a ``Failure`` outcome. ``partial`` carries whatever was
recovered before the failure (e.g. a profile's display name and bio).
"""

from news_curator.models.content import ErrorKind, ExtractedRecord


class ExtractionError(Exception):
    """Base class for all extraction failures."""

    kind: ErrorKind = ErrorKind.UPSTREAM_HTTP_ERROR

    def __init__(self, message: str, partial: ExtractedRecord | None = None):
        super().__init__(message)
        self.message = message
        self.partial = partial


class InvalidUrl(ExtractionError):
    kind = ErrorKind.INVALID_URL


class UpstreamHttpError(ExtractionError):
    kind = ErrorKind.UPSTREAM_HTTP_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        partial: ExtractedRecord | None = None,
    ):
        super().__init__(message, partial)
        self.status_code = status_code


class ExtractionTimeout(ExtractionError):
    kind = ErrorKind.TIMEOUT


class NoContentFound(ExtractionError):
    """Fetch succeeded but nothing extractable: usually private, empty, or deleted content."""

    kind = ErrorKind.NO_CONTENT_FOUND


class AutomationUnavailable(ExtractionError):
    kind = ErrorKind.AUTOMATION_UNAVAILABLE


class ToolUnavailable(ExtractionError):
    kind = ErrorKind.TOOL_UNAVAILABLE
