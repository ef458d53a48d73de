"""
Code search across the allowed repository roots using ripgrep.

ripgrep is invoked once per root with JSON output. Its output is a stream of
independent JSON records; only ``match`` records become results.
"""

import base64
import json
import math
import os
import re
import shutil
import subprocess
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from ..io.errors import InvalidQueryError, InvalidRequestError, ToolUnavailableError
from ..io.logger import logger
from ..io.safe import COMMAND_ALLOWLIST, open_safe_process, run_safe_command

MAX_QUERY_LENGTH = 500
DEFAULT_MAX_RESULTS = 30
DEFAULT_TIMEOUT_MS = 5000
MAX_OUTPUT_BUFFER = 10 * 1024 * 1024
VERSION_PROBE_TIMEOUT = 2.0
READ_CHUNK_SIZE = 64 * 1024
MAX_STDERR_BYTES = 64 * 1024

# ripgrep exits with 1 when a root has no matches
NO_MATCHES_EXIT_CODE = 1

_SHELL_METACHARACTERS = re.compile(r"[;&|`$()]")
_PROJECT_DIR = Path(__file__).resolve().parents[2]


@dataclass
class Match:
    """One line in one file that satisfied the query."""

    path: str
    line: int
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


def sanitize_query(query: str) -> str:
    """Strip shell metacharacters and cap the query length."""
    return _SHELL_METACHARACTERS.sub("", query)[:MAX_QUERY_LENGTH]


def find_ripgrep(configured: Optional[str] = None) -> Optional[str]:
    """
    Locate the ripgrep executable.

    Detection order:
    1. Explicitly configured path (LOCALSEARCH_RG_PATH)
    2. rg / rg.exe shipped in the project directory
    3. rg on PATH
    """
    if configured:
        if os.path.basename(configured) not in COMMAND_ALLOWLIST:
            logger.warning(f"Configured ripgrep path {configured} is not an rg executable")
            return None
        return configured if os.path.isfile(configured) else None

    for name in ("rg", "rg.exe"):
        local = _PROJECT_DIR / name
        if local.is_file():
            return str(local)

    return shutil.which("rg")


def check_ripgrep_installed(rg_path: Optional[str] = None) -> bool:
    """Probe ``rg --version`` with a short timeout."""
    rg = find_ripgrep(rg_path)
    if not rg:
        return False
    try:
        result = run_safe_command([rg, "--version"], timeout=VERSION_PROBE_TIMEOUT)
    except (OSError, ValueError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def _arbitrary_text(data: dict) -> str:
    """Decode ripgrep's {"text": ...} / {"bytes": base64} union."""
    if "text" in data:
        return data["text"]
    return base64.b64decode(data["bytes"]).decode("utf-8", errors="replace")


def iter_matches(output: str) -> Iterator[Match]:
    """Yield a Match for every ``match`` record in ripgrep's JSON-lines output."""
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            record = json.loads(line)
            if record.get("type") != "match":
                continue
            data = record["data"]
            yield Match(
                path=_arbitrary_text(data["path"]),
                line=int(data["line_number"]),
                text=_arbitrary_text(data["lines"]).strip(),
            )
        except (ValueError, KeyError, TypeError, AttributeError):
            # Skip malformed records
            continue


def _build_command(rg: str, query: str, root: str, max_per_file: int) -> List[str]:
    return [
        rg,
        "-i",  # case insensitive
        "-n",  # line numbers
        "--json",
        "--max-count",
        str(max_per_file),
        "--max-filesize",
        "10M",
        "-e",
        query,
        root,
    ]


class _PipeReader(threading.Thread):
    """
    Drain one pipe of a child process, keeping at most ``limit`` bytes.

    With ``stop_on_overflow`` the reader gives up as soon as the limit is
    passed; otherwise extra bytes are discarded so the child never blocks.
    """

    def __init__(self, stream, limit: int, stop_on_overflow: bool = False):
        super().__init__(daemon=True)
        self.stream = stream
        self.limit = limit
        self.stop_on_overflow = stop_on_overflow
        self.data = bytearray()
        self.overflowed = False

    def run(self):
        while True:
            chunk = self.stream.read1(READ_CHUNK_SIZE)
            if not chunk:
                break
            if len(self.data) + len(chunk) > self.limit:
                self.overflowed = True
                if self.stop_on_overflow:
                    # left open until the child is dead
                    return
                continue
            self.data.extend(chunk)
        self.stream.close()

    def text(self) -> str:
        return bytes(self.data).decode("utf-8", errors="replace")


def _remaining(deadline: float) -> float:
    return max(deadline - time.monotonic(), 0.0)


def _run_root(
    rg: str, query: str, root: str, max_per_file: int, timeout_ms: int, max_buffer: int
) -> Optional[str]:
    """
    Run ripgrep against one root. Returns its output, or None if the root failed.

    stdout is read incrementally; once it passes ``max_buffer`` bytes, or the
    wall-clock timeout expires, the process is killed.
    """
    try:
        process = open_safe_process(_build_command(rg, query, root, max_per_file))
    except (OSError, ValueError) as e:
        logger.warning(f"Search error in {root}: {e}")
        return None

    deadline = time.monotonic() + timeout_ms / 1000
    stdout = _PipeReader(process.stdout, max_buffer, stop_on_overflow=True)
    stderr = _PipeReader(process.stderr, MAX_STDERR_BYTES)
    stdout.start()
    stderr.start()

    try:
        stdout.join(_remaining(deadline))
        if stdout.is_alive():
            logger.warning(f"Search in {root} timed out after {timeout_ms}ms")
            return None
        if stdout.overflowed:
            logger.warning(f"Search output in {root} exceeded {max_buffer} bytes, skipping root")
            return None
        try:
            returncode = process.wait(timeout=_remaining(deadline))
        except subprocess.TimeoutExpired:
            logger.warning(f"Search in {root} timed out after {timeout_ms}ms")
            return None
    finally:
        if process.poll() is None:
            process.kill()
            process.wait()
        if not stdout.is_alive():
            process.stdout.close()

    if returncode == NO_MATCHES_EXIT_CODE:
        return ""

    if returncode != 0:
        stderr.join(_remaining(deadline))
        logger.warning(f"Search error in {root} (exit {returncode}): {stderr.text().strip()}")

    return stdout.text()


def search_code(
    roots: Sequence[str],
    query: str,
    max_results: int = DEFAULT_MAX_RESULTS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    rg_path: Optional[str] = None,
    max_buffer: int = MAX_OUTPUT_BUFFER,
) -> List[Match]:
    """
    Search every root for ``query`` and return at most ``max_results`` matches.

    Roots are searched in order and the search stops as soon as enough
    matches are collected, so earlier roots are favored. A failing root is
    logged and skipped.
    """
    if not query or not query.strip():
        raise InvalidQueryError("Query cannot be empty")

    sanitized = sanitize_query(query)
    if not sanitized.strip():
        raise InvalidQueryError("Query is empty after removing disallowed characters")

    if max_results < 1:
        raise InvalidRequestError("max_results must be >= 1")

    if not roots:
        return []

    rg = find_ripgrep(rg_path)
    if not rg:
        raise ToolUnavailableError("ripgrep (rg) is not installed or not in PATH")

    max_per_file = math.ceil(max_results / len(roots))
    results: List[Match] = []

    for root in roots:
        output = _run_root(rg, sanitized, root, max_per_file, timeout_ms, max_buffer)
        if not output:
            continue

        for match in iter_matches(output):
            results.append(match)
            if len(results) >= max_results:
                return results

    return results
