from .errors import (
    AccessDeniedError,
    ConfigurationError,
    FileTooLargeError,
    InvalidQueryError,
    InvalidRequestError,
    LocalSearchError,
    NotFoundError,
    OutOfRangeError,
    ToolUnavailableError,
    UnsupportedContentError,
)
from .files import (
    FileInfo,
    FileSnippet,
    get_file_info,
    is_binary_file,
    read_file_snippet,
)
from .safe import (
    is_path_allowed,
    open_safe_process,
    run_safe_command,
    validate_path,
)

__all__ = [
    "AccessDeniedError",
    "ConfigurationError",
    "FileTooLargeError",
    "InvalidQueryError",
    "InvalidRequestError",
    "LocalSearchError",
    "NotFoundError",
    "OutOfRangeError",
    "ToolUnavailableError",
    "UnsupportedContentError",
    "FileInfo",
    "FileSnippet",
    "get_file_info",
    "is_binary_file",
    "read_file_snippet",
    "is_path_allowed",
    "open_safe_process",
    "run_safe_command",
    "validate_path",
]
