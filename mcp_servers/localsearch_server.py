"""
MCP server exposing LocalSearch code search and file reading as LLM tools.

Every tool forwards to the LocalSearch HTTP API and renders the JSON answer
as plain text. Tool names come from a profile so existing MCP client
configurations that know either naming scheme keep working.
"""

import os
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from config import get_settings, load_configuration
from utils.io.logger import logger
from utils.web import LocalSearchAPIError, LocalSearchClient

DEFAULT_READ_LINES = 100

TOOL_PROFILES = {
    "localsearch": {
        "server_name": "localsearch-mcp",
        "search": "search_code",
        "read": "read_file",
        "info": "get_file_info",
        "health": "health_check",
        "default_max_results": 30,
    },
    "local-search": {
        "server_name": "local-search",
        "search": "search_code",
        "read": "get_file_content",
        "info": "get_file_info",
        "health": "health_check",
        "default_max_results": 10,
    },
}


def normalize_path(path: str) -> str:
    """Use forward slashes so Windows paths survive JSON round trips."""
    return path.replace("\\", "/")


def format_search_results(query: str, data: dict) -> str:
    results = data.get("results", [])
    if not results:
        return f'No results found for query: "{query}"'

    formatted = "\n\n".join(
        f"{i}. {r['path']}:{r['line']}\n   {r['text']}" for i, r in enumerate(results, start=1)
    )
    return f"Found {data.get('count', len(results))} results:\n\n{formatted}"


def format_snippet(data: dict) -> str:
    return (
        f"File: {data['path']}\n"
        f"Lines: {data['start']}-{data['end']} (total: {data['totalLines']})\n\n"
        f"{data['snippet']}"
    )


def format_file_info(path: str, data: dict) -> str:
    if not data.get("exists"):
        return f"File: {path}\nExists: no"

    lines = [f"File: {path}", "Exists: yes", f"Size: {data.get('size', 0)} bytes"]
    if "lines" in data:
        lines.append(f"Lines: {data['lines']}")
    if "isBinary" in data:
        lines.append(f"Binary: {'yes' if data['isBinary'] else 'no'}")
    return "\n".join(lines)


def format_health(data: dict) -> str:
    return (
        f"LocalSearch API Status: {data.get('status')}\n"
        f"Ripgrep installed: {data.get('tool_installed')}\n"
        f"Repositories: {data.get('repo_count')}"
    )


class LocalSearchTools:
    """Tool implementations shared by every profile."""

    def __init__(self, client: LocalSearchClient):
        self.client = client

    def search_code(self, query: str, max_results: int = 30) -> str:
        if not query or not query.strip():
            raise ToolError("Query parameter is required")
        try:
            data = self.client.search(query, max_results=max_results)
        except LocalSearchAPIError as e:
            raise ToolError(str(e)) from e
        return format_search_results(query, data)

    def read_file(self, path: str, start: int = 1, end: Optional[int] = None) -> str:
        if not path:
            raise ToolError("path parameter is required")
        if end is None:
            end = start + DEFAULT_READ_LINES - 1
        try:
            data = self.client.read_file(normalize_path(path), start, end)
        except LocalSearchAPIError as e:
            raise ToolError(str(e)) from e
        return format_snippet(data)

    def get_file_info(self, path: str) -> str:
        if not path:
            raise ToolError("path parameter is required")
        normalized = normalize_path(path)
        try:
            data = self.client.file_info(normalized)
        except LocalSearchAPIError as e:
            raise ToolError(str(e)) from e
        return format_file_info(normalized, data)

    def health_check(self) -> str:
        try:
            data = self.client.health()
        except LocalSearchAPIError as e:
            raise ToolError(f"LocalSearch API is not available: {e}") from e
        return format_health(data)


def build_server(
    profile: str = "localsearch", client: Optional[LocalSearchClient] = None
) -> FastMCP:
    """Create a FastMCP server whose tool names follow ``profile``."""
    if profile not in TOOL_PROFILES:
        raise ValueError(
            f"Unknown tool profile '{profile}'. Choose one of: {', '.join(TOOL_PROFILES)}"
        )
    names = TOOL_PROFILES[profile]
    default_max_results = names["default_max_results"]

    if client is None:
        settings = get_settings()
        client = LocalSearchClient(settings.api_url, timeout=settings.api_timeout)
    tools = LocalSearchTools(client)

    mcp = FastMCP(names["server_name"])

    @mcp.tool(
        name=names["search"],
        description=(
            "Search for code across local repositories using regex or text patterns. "
            "Returns file paths, line numbers, and matching text. Use this to find "
            "functions, classes, error messages, or any code pattern. "
            f"max_results defaults to {default_max_results} (max 100)."
        ),
    )
    def search_code(query: str, max_results: int = default_max_results) -> str:
        return tools.search_code(query, max_results=max_results)

    @mcp.tool(
        name=names["read"],
        description=(
            "Read a file snippet by line range (1-based, inclusive, max 200 lines per "
            "request). Use this after search_code to get more context around the code "
            "you found. Provide the exact file path from search results. When end is "
            f"omitted, {DEFAULT_READ_LINES} lines from start are returned."
        ),
    )
    def read_file(path: str, start: int = 1, end: Optional[int] = None) -> str:
        return tools.read_file(path, start=start, end=end)

    @mcp.tool(
        name=names["info"],
        description="Get metadata about a file (existence, size, line count, binary flag).",
    )
    def get_file_info(path: str) -> str:
        return tools.get_file_info(path)

    @mcp.tool(
        name=names["health"],
        description="Check if the LocalSearch API is running and available.",
    )
    def health_check() -> str:
        return tools.health_check()

    logger.debug(f"MCP server '{names['server_name']}' ready (profile: {profile})")
    return mcp


if __name__ == "__main__":
    load_configuration()
    build_server(os.getenv("LOCALSEARCH_MCP_PROFILE", "localsearch")).run()
