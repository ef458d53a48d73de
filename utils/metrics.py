"""
In-memory request, search and file-read metrics for the LocalSearch API.

One collector is created per application and shared by reference. FastAPI
runs sync endpoints in a thread pool, so every update happens under a lock.
"""

import threading
import time
from collections import deque
from datetime import datetime, timezone
from typing import Dict


class MetricsCollector:
    """Counters and rolling response-time averages."""

    MAX_RECENT_ERRORS = 50
    MAX_RESPONSE_TIMES = 100

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._start_time = time.monotonic()
            self._requests_total = 0
            self._by_endpoint: Dict[str, int] = {}
            self._by_status: Dict[int, int] = {}
            self._search_times = deque(maxlen=self.MAX_RESPONSE_TIMES)
            self._searches_total = 0
            self._searches_failed = 0
            self._search_results = 0
            self._file_times = deque(maxlen=self.MAX_RESPONSE_TIMES)
            self._reads_total = 0
            self._reads_failed = 0
            self._errors_total = 0
            self._recent_errors = deque(maxlen=self.MAX_RECENT_ERRORS)

    def record_request(self, endpoint: str, status_code: int) -> None:
        with self._lock:
            self._requests_total += 1
            self._by_endpoint[endpoint] = self._by_endpoint.get(endpoint, 0) + 1
            self._by_status[status_code] = self._by_status.get(status_code, 0) + 1

    def record_search(self, response_time_ms: float, result_count: int, success: bool) -> None:
        with self._lock:
            self._searches_total += 1
            if success:
                self._search_times.append(response_time_ms)
                self._search_results += result_count
            else:
                self._searches_failed += 1

    def record_file_read(self, response_time_ms: float, success: bool) -> None:
        with self._lock:
            self._reads_total += 1
            if success:
                self._file_times.append(response_time_ms)
            else:
                self._reads_failed += 1

    def record_error(self, error: str, endpoint: str) -> None:
        """Keep the most recent errors, newest first."""
        with self._lock:
            self._errors_total += 1
            self._recent_errors.appendleft(
                {
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "error": error,
                    "endpoint": endpoint,
                }
            )

    @staticmethod
    def _average(samples) -> float:
        return sum(samples) / len(samples) if samples else 0.0

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "uptime": int(time.monotonic() - self._start_time),
                "requests": {
                    "total": self._requests_total,
                    "by_endpoint": dict(self._by_endpoint),
                    "by_status": {str(k): v for k, v in self._by_status.items()},
                },
                "search": {
                    "total_searches": self._searches_total,
                    "average_response_time": self._average(self._search_times),
                    "total_results": self._search_results,
                    "failed_searches": self._searches_failed,
                },
                "file": {
                    "total_reads": self._reads_total,
                    "average_response_time": self._average(self._file_times),
                    "failed_reads": self._reads_failed,
                },
                "errors": {
                    "total": self._errors_total,
                    "recent": list(self._recent_errors),
                },
            }

    def health_status(self) -> dict:
        """Derive healthy / degraded / unhealthy from error rate, search success and latency."""
        metrics = self.snapshot()
        checks = {}

        total = metrics["requests"]["total"]
        error_rate = metrics["errors"]["total"] / total if total else 0.0
        checks["error_rate"] = (
            {"status": "pass"}
            if error_rate < 0.05
            else {"status": "warn", "message": f"Error rate: {error_rate * 100:.2f}%"}
        )

        searches = metrics["search"]["total_searches"]
        success_rate = 1 - metrics["search"]["failed_searches"] / searches if searches else 1.0
        checks["search_success"] = (
            {"status": "pass"}
            if success_rate > 0.9
            else {"status": "warn", "message": f"Search success: {success_rate * 100:.2f}%"}
        )

        avg = metrics["search"]["average_response_time"]
        checks["response_time"] = (
            {"status": "pass"}
            if avg < 2000
            else {"status": "warn", "message": f"Slow response: {avg:.0f}ms"}
        )

        statuses = {check["status"] for check in checks.values()}
        if "fail" in statuses:
            status = "unhealthy"
        elif "warn" in statuses:
            status = "degraded"
        else:
            status = "healthy"

        return {"status": status, "checks": checks}
