import time
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Request

from config import Settings
from utils.io import get_file_info, read_file_snippet
from utils.io.logger import logger
from utils.metrics import MetricsCollector
from utils.search import check_ripgrep_installed, search_code

from . import __version__
from .schemas import FileInfoRequest, FileRequest, SearchRequest

router = APIRouter()


def get_roots(request: Request) -> List[str]:
    return request.app.state.roots


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics(request: Request) -> MetricsCollector:
    return request.app.state.metrics


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


@router.post("/search")
def search(
    body: SearchRequest,
    roots: List[str] = Depends(get_roots),
    settings: Settings = Depends(get_settings),
    metrics: MetricsCollector = Depends(get_metrics),
):
    """Search code across repositories."""
    started = time.perf_counter()
    try:
        results = search_code(
            roots,
            body.query,
            max_results=body.max_results,
            timeout_ms=settings.search_timeout_ms,
            rg_path=settings.rg_path,
        )
    except Exception as e:
        metrics.record_search(_elapsed_ms(started), 0, success=False)
        metrics.record_error(str(e), "/search")
        raise

    metrics.record_search(_elapsed_ms(started), len(results), success=True)
    return {
        "success": True,
        "query": body.query,
        "count": len(results),
        "results": [r.to_dict() for r in results],
    }


@router.post("/file")
def read_file(
    body: FileRequest,
    roots: List[str] = Depends(get_roots),
    metrics: MetricsCollector = Depends(get_metrics),
):
    """Get a file snippet by line range."""
    started = time.perf_counter()
    try:
        snippet = read_file_snippet(roots, body.path, body.start, body.end)
    except Exception as e:
        metrics.record_file_read(_elapsed_ms(started), success=False)
        metrics.record_error(str(e), "/file")
        raise

    metrics.record_file_read(_elapsed_ms(started), success=True)
    return {"success": True, **snippet.to_dict()}


@router.post("/file-info")
def file_info(
    body: FileInfoRequest,
    roots: List[str] = Depends(get_roots),
    metrics: MetricsCollector = Depends(get_metrics),
):
    """Get file metadata without reading content."""
    try:
        info = get_file_info(roots, body.path)
    except Exception as e:
        metrics.record_error(str(e), "/file-info")
        raise
    return {"success": True, **info.to_dict()}


@router.get("/health")
def health(
    roots: List[str] = Depends(get_roots),
    settings: Settings = Depends(get_settings),
):
    installed = check_ripgrep_installed(settings.rg_path)
    if not installed:
        logger.warning("Health check: ripgrep is not available")
    return {
        "status": "ok" if installed else "degraded",
        "tool_installed": installed,
        "repo_count": len(roots),
        "repos": roots,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/metrics")
def metrics_report(metrics: MetricsCollector = Depends(get_metrics)):
    return {"metrics": metrics.snapshot(), "health": metrics.health_status()}


@router.get("/")
def index():
    return {
        "name": "LocalSearch API",
        "version": __version__,
        "endpoints": {
            "POST /search": "Search code with query",
            "POST /file": "Get file snippet by line range",
            "POST /file-info": "Get file metadata",
            "GET /health": "Health check",
            "GET /metrics": "Request, search and file-read metrics",
        },
    }
