from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests

from .events import page_key

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF = 0.5


class NetworkError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class _Retryable(Exception):
    pass


@dataclass
class FetchResult:
    page: str
    sections: List[Dict[str, Any]] = field(default_factory=list)
    provenance: Optional[str] = None


class ContentFetcher:
    """
    Client for the content sections endpoint.

    Timeouts, connection errors and 5xx replies are retried with
    exponential backoff; 4xx replies fail at once.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
        lang: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.sleep = sleep
        self.lang = lang

    def url_for(self, page: str) -> str:
        return f"{self.base_url}/api/v1/content/sections/{page_key(page)}"

    def fetch_sections(self, page: str) -> FetchResult:
        url = self.url_for(page)
        params = {"lang": self.lang} if self.lang else None
        last_error = None

        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
                if response.status_code >= 500:
                    raise _Retryable(f"server error {response.status_code}")
                if response.status_code >= 400:
                    raise NetworkError(
                        f"Content request for '{page}' rejected with {response.status_code}",
                        status_code=response.status_code,
                    )
                body = response.json()
                return FetchResult(
                    page=body.get("page") or page_key(page),
                    sections=body.get("data") or [],
                    provenance=body.get("provenance"),
                )

            except (requests.Timeout, requests.ConnectionError, _Retryable) as exc:
                last_error = exc
                if attempt < self.max_retries:
                    delay = self.backoff_factor * 2 ** attempt
                    logger.warning(f"[FETCH] {url} failed ({exc}); retrying in {delay:.2f}s")
                    self.sleep(delay)

            except ValueError as exc:
                raise NetworkError(f"Malformed content response for '{page}': {exc}") from exc

            except requests.RequestException as exc:
                logger.warning(f"[FETCH] {url} failed ({exc}); not retrying")
                raise NetworkError(f"Content request for '{page}' failed: {exc}") from exc

        raise NetworkError(
            f"Content request for '{page}' failed after {self.max_retries + 1} attempts: {last_error}"
        ) from last_error
