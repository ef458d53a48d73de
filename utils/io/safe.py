import os
import subprocess
from typing import Iterable, List, Optional

from .errors import AccessDeniedError

# Executables the service is allowed to launch
COMMAND_ALLOWLIST = {"rg", "rg.exe"}


def _normalize(path: str) -> str:
    """Absolute, normalized, case-folded (where the platform folds case) form of a path."""
    return os.path.normcase(os.path.abspath(path))


def is_path_allowed(path: str, allowed_roots: Iterable[str]) -> bool:
    """
    Check that ``path`` is one of the allowed roots or lies beneath one.

    The comparison is component-wise, so ``/data/repo-evil`` is not accepted
    for the root ``/data/repo``. Symlinks are not resolved.
    """
    candidate = _normalize(path)
    for root in allowed_roots:
        root_abs = _normalize(root)
        if candidate == root_abs:
            return True
        try:
            if os.path.commonpath([candidate, root_abs]) == root_abs:
                return True
        except ValueError:
            # Different drives on Windows
            continue
    return False


def validate_path(path: str, allowed_roots: Iterable[str]) -> str:
    """Resolve ``path`` to an absolute path inside the allowed roots or raise AccessDeniedError."""
    if not is_path_allowed(path, allowed_roots):
        raise AccessDeniedError("Access denied: path is outside allowed repositories")
    return os.path.abspath(path)


def _check_command(cmd: List[str], kwargs: dict) -> None:
    if kwargs.get("shell"):
        raise ValueError("Running commands with shell=True is disallowed for security.")

    if not cmd:
        raise ValueError("Empty command list.")

    # Get the base executable name (handle paths if necessary)
    executable = os.path.basename(cmd[0])

    if executable not in COMMAND_ALLOWLIST:
        raise ValueError(f"Command '{executable}' is not in the security allowlist.")


def run_safe_command(
    cmd: List[str],
    cwd: Optional[str] = None,
    capture_output: bool = True,
    text: bool = True,
    check: bool = False,
    **kwargs,
) -> subprocess.CompletedProcess:
    """
    Safely execute a command from an allowlist.
    Disallows shell=True and validates the executable.
    """
    _check_command(cmd, kwargs)
    return subprocess.run(
        cmd, cwd=cwd, capture_output=capture_output, text=text, check=check, **kwargs
    )


def open_safe_process(cmd: List[str], cwd: Optional[str] = None, **kwargs) -> subprocess.Popen:
    """
    Start an allowlisted command with binary stdout and stderr pipes.
    The caller owns the process and must reap it.
    """
    _check_command(cmd, kwargs)
    return subprocess.Popen(
        cmd, cwd=cwd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, **kwargs
    )
