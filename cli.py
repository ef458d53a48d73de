from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from config import get_settings, load_configuration
from utils.io import LocalSearchError, get_file_info, read_file_snippet
from utils.io.errors import ConfigurationError
from utils.io.logger import logger
from utils.search import check_ripgrep_installed, search_code

console = Console()
app = typer.Typer(context_settings={"help_option_names": ["-h", "--help"]})


def _require_roots() -> list[str]:
    try:
        return get_settings().require_roots()
    except ConfigurationError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)


@app.callback()
def main(
    env_file: Annotated[
        Path | None,
        typer.Option(
            "--env-file",
            "-e",
            help="Explicit path to a .env file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
) -> None:
    """
    LocalSearch - ripgrep-backed code search for local repositories
    """
    load_configuration(env_file=str(env_file) if env_file else None)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind (LOCALSEARCH_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on (LOCALSEARCH_PORT)"),
) -> None:
    """
    Run the LocalSearch HTTP API.
    """
    import uvicorn

    from api import create_app

    settings = get_settings()
    _require_roots()

    rg_installed = check_ripgrep_installed(settings.rg_path)
    if not rg_installed:
        logger.warning("ripgrep (rg) is not installed or not in PATH")
        logger.warning("Search functionality will not work properly")
        logger.warning("Install ripgrep: https://github.com/BurntSushi/ripgrep#installation")

    bind_host = host or settings.host
    bind_port = port or settings.port
    application = create_app(settings)

    logger.success(f"LocalSearch API server running on http://localhost:{bind_port}")
    logger.success(f"Monitoring {len(application.state.roots)} repository root(s)")
    logger.success(f"Ripgrep status: {'installed' if rg_installed else 'NOT FOUND'}")
    uvicorn.run(application, host=bind_host, port=bind_port, log_level="warning")


@app.command("mcp")
def mcp_server(
    profile: str | None = typer.Option(
        None,
        "--profile",
        help="Tool naming profile: 'localsearch' or 'local-search' (LOCALSEARCH_MCP_PROFILE)",
    ),
) -> None:
    """
    Run the MCP server over stdio, forwarding to the HTTP API.
    """
    from mcp_servers.localsearch_server import build_server

    selected = profile or get_settings().mcp_profile
    try:
        server = build_server(selected)
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)
    server.run()


@app.command()
def search(
    query: Annotated[str, typer.Argument(..., help="Text or regex pattern")],
    max_results: int = typer.Option(30, "--max-results", "-n", min=1, max=100),
) -> None:
    """
    Search the configured repositories.

    Examples:
        localsearch search getUserInfo
        localsearch search "function.*Login" -n 10
    """
    settings = get_settings()
    roots = _require_roots()
    try:
        results = search_code(
            roots,
            query,
            max_results=max_results,
            timeout_ms=settings.search_timeout_ms,
            rg_path=settings.rg_path,
        )
    except LocalSearchError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    if not results:
        console.print(f'No results found for query: "{escape(query)}"')
        return

    table = Table(title=f"{len(results)} results")
    table.add_column("Location", style="cyan")
    table.add_column("Text")
    for r in results:
        table.add_row(escape(f"{r.path}:{r.line}"), escape(r.text))
    console.print(table)


@app.command()
def read(
    path: Annotated[str, typer.Argument(..., help="File path")],
    start: Annotated[int, typer.Argument(..., help="First line (1-based)")],
    end: Annotated[int, typer.Argument(..., help="Last line (inclusive)")],
) -> None:
    """
    Print a line range of a file inside the configured repositories.
    """
    roots = _require_roots()
    try:
        snippet = read_file_snippet(roots, path, start, end)
    except LocalSearchError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    console.print(
        f"[bold]{escape(snippet.path)}[/bold] "
        f"[dim]lines {snippet.start}-{snippet.end} of {snippet.total_lines}[/dim]",
        soft_wrap=True,
    )
    console.print(snippet.snippet, markup=False, highlight=False)


@app.command()
def info(path: Annotated[str, typer.Argument(..., help="File path")]) -> None:
    """
    Show file metadata without reading its content.
    """
    roots = _require_roots()
    try:
        file_info = get_file_info(roots, path)
    except LocalSearchError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    for key, value in file_info.to_dict().items():
        console.print(f"{key}: {value}", markup=False, highlight=False)


@app.command()
def status() -> None:
    """
    Show configured repository roots and ripgrep availability.
    """
    settings = get_settings()
    console.print("[bold]System Diagnostics[/bold]")
    roots = settings.allowed_roots
    if roots:
        for root in roots:
            console.print(f"  root: {escape(root)}", soft_wrap=True)
    else:
        console.print("  [red]No repository roots configured (REPO_ROOTS)[/red]")

    installed = check_ripgrep_installed(settings.rg_path)
    console.print(f"  ripgrep: {'[green]installed[/green]' if installed else '[red]NOT FOUND[/red]'}")


if __name__ == "__main__":
    app()
