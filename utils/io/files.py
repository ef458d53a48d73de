import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .errors import (
    FileTooLargeError,
    InvalidRequestError,
    NotFoundError,
    OutOfRangeError,
    UnsupportedContentError,
)
from .safe import validate_path

MAX_SNIPPET_LINES = 200
MAX_FILE_SIZE = 10 * 1024 * 1024
BINARY_SAMPLE_SIZE = 8000

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass
class FileSnippet:
    """A contiguous, 1-based inclusive line range of a single file."""

    path: str
    start: int
    end: int
    snippet: str
    total_lines: int

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "start": self.start,
            "end": self.end,
            "snippet": self.snippet,
            "totalLines": self.total_lines,
        }


@dataclass
class FileInfo:
    exists: bool
    size: int
    lines: Optional[int] = None
    is_binary: Optional[bool] = None

    def to_dict(self) -> dict:
        data = {"exists": self.exists, "size": self.size}
        if self.lines is not None:
            data["lines"] = self.lines
        if self.is_binary is not None:
            data["isBinary"] = self.is_binary
        return data


def is_binary_file(path: str) -> bool:
    """
    Heuristic binary check: a NUL byte within the first 8000 bytes.
    Unreadable files are treated as binary.
    """
    try:
        with open(path, "rb") as f:
            sample = f.read(BINARY_SAMPLE_SIZE)
    except OSError:
        return True
    return b"\x00" in sample


def split_lines(content: str) -> List[str]:
    """Split on \\r\\n or \\n. A trailing newline yields a final empty line."""
    return _LINE_BREAK.split(content)


def _read_text(path: Path) -> str:
    # utf-8-sig drops a leading BOM
    return path.read_bytes().decode("utf-8-sig", errors="replace")


def read_file_snippet(
    allowed_roots: Iterable[str], path: str, start: int, end: int
) -> FileSnippet:
    """
    Read lines ``start``..``end`` (1-based, inclusive) of a file inside the allowed roots.

    ``end`` is clamped to the file length; a ``start`` beyond the end of the
    file is an error. At most MAX_SNIPPET_LINES lines are served per call.
    """
    if not path or not path.strip():
        raise InvalidRequestError("File path is required")

    if start < 1:
        raise InvalidRequestError("Start line must be >= 1")

    if end < start:
        raise InvalidRequestError("End line must be >= start line")

    if end - start + 1 > MAX_SNIPPET_LINES:
        raise InvalidRequestError(f"Maximum {MAX_SNIPPET_LINES} lines per request")

    safe_path = Path(validate_path(path, allowed_roots))

    if not safe_path.is_file() or not os.access(safe_path, os.R_OK):
        raise NotFoundError("File not found or not readable")

    if is_binary_file(str(safe_path)):
        raise UnsupportedContentError("Cannot read binary file")

    if safe_path.stat().st_size > MAX_FILE_SIZE:
        raise FileTooLargeError("File too large (max 10MB)")

    try:
        lines = split_lines(_read_text(safe_path))
    except OSError as e:
        raise NotFoundError("File not found or not readable") from e

    total_lines = len(lines)
    if start > total_lines:
        raise OutOfRangeError(f"Start line {start} exceeds file length {total_lines}")

    actual_end = min(end, total_lines)
    return FileSnippet(
        path=path,
        start=start,
        end=actual_end,
        snippet="\n".join(lines[start - 1 : actual_end]),
        total_lines=total_lines,
    )


def get_file_info(allowed_roots: Iterable[str], path: str) -> FileInfo:
    """
    Report existence, size, line count and binary flag without returning content.

    Only an access violation raises; every filesystem failure is reported as
    a missing file.
    """
    safe_path = Path(validate_path(path, allowed_roots))

    try:
        stats = safe_path.stat()
        if not safe_path.is_file():
            return FileInfo(exists=False, size=0)

        # Skip the line count for binaries
        if is_binary_file(str(safe_path)):
            return FileInfo(exists=True, size=stats.st_size, is_binary=True)

        lines = len(split_lines(_read_text(safe_path)))
        return FileInfo(exists=True, size=stats.st_size, lines=lines, is_binary=False)
    except (OSError, ValueError):
        # ValueError: embedded NUL in the path
        return FileInfo(exists=False, size=0)
