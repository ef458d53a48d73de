from .ripgrep import (
    Match,
    check_ripgrep_installed,
    find_ripgrep,
    sanitize_query,
    search_code,
)

__all__ = [
    "Match",
    "check_ripgrep_installed",
    "find_ripgrep",
    "sanitize_query",
    "search_code",
]
