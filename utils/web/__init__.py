from .client import LocalSearchAPIError, LocalSearchClient

__all__ = ["LocalSearchAPIError", "LocalSearchClient"]
