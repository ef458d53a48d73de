"""
Error taxonomy shared by the file readers, the search engine and the HTTP API.

Each error carries a stable ``code`` and the HTTP ``status_code`` the API
answers with, so route handlers never have to inspect messages.
"""


class LocalSearchError(Exception):
    """Base class for all caller-visible LocalSearch failures."""

    code = "internal"
    status_code = 500


class InvalidRequestError(LocalSearchError):
    """Malformed or out-of-bounds input. The caller can fix the request."""

    code = "invalid_request"
    status_code = 400


class InvalidQueryError(InvalidRequestError):
    code = "invalid_query"


class AccessDeniedError(LocalSearchError):
    """Path lies outside every allowed repository root."""

    code = "access_denied"
    status_code = 403


class NotFoundError(LocalSearchError):
    code = "not_found"


class UnsupportedContentError(LocalSearchError):
    code = "unsupported_content"


class FileTooLargeError(LocalSearchError):
    code = "too_large"


class OutOfRangeError(LocalSearchError):
    code = "out_of_range"


class ToolUnavailableError(LocalSearchError):
    """The ripgrep executable could not be located."""

    code = "tool_unavailable"
    status_code = 503


class ConfigurationError(Exception):
    """Raised at startup when the service cannot be configured."""
