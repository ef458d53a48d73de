from typing import Any, Dict, Optional

import httpx


class LocalSearchAPIError(Exception):
    """The LocalSearch API answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LocalSearchClient:
    """
    Thin synchronous client for the LocalSearch HTTP API.
    An existing httpx.Client (e.g. a FastAPI TestClient) may be supplied.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, endpoint: str, body: Optional[dict] = None) -> Dict[str, Any]:
        try:
            response = self._client.request(method, endpoint, json=body)
        except httpx.HTTPError as e:
            raise LocalSearchAPIError(
                f"Failed to call LocalSearch API at {self.base_url}: {e}"
            ) from e

        if response.is_error:
            raise LocalSearchAPIError(
                f"LocalSearch API error: {response.status_code} - {self._error_text(response)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise LocalSearchAPIError("LocalSearch API returned invalid JSON") from e

    @staticmethod
    def _error_text(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return response.text

    def search(self, query: str, max_results: int = 30) -> Dict[str, Any]:
        return self._request("POST", "/search", {"query": query, "max_results": max_results})

    def read_file(self, path: str, start: int, end: int) -> Dict[str, Any]:
        return self._request("POST", "/file", {"path": path, "start": start, "end": end})

    def file_info(self, path: str) -> Dict[str, Any]:
        return self._request("POST", "/file-info", {"path": path})

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")
