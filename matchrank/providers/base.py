"""Shared HTTP plumbing for provider clients.

Clients do raw HTTP only: build the URL, add auth, issue one GET and return
decoded JSON. No data transformation happens here. Every failure is raised
as ProviderError so the aggregator can fall back to the next provider.
"""

import logging
import threading
from typing import Any

import httpx

from matchrank.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """Low-level client base with a lazily created, shared httpx.Client.

    Subclasses set PROVIDER and override _headers() / _auth_params().
    A transport can be injected (httpx.MockTransport in tests).
    """

    PROVIDER = "base"
    LOG_TAG = "PROVIDER"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None
        self._client_lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            with self._client_lock:
                # Double-check after acquiring lock
                if self._client is None:
                    self._client = httpx.Client(
                        timeout=self._timeout,
                        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                        transport=self._transport,
                    )
        return self._client

    def _headers(self) -> dict[str, str]:
        return {}

    def _auth_params(self) -> dict[str, str]:
        return {}

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}" if path else self._base_url

    def _request(self, path: str, params: dict | None = None) -> Any:
        """Issue exactly one GET and return the decoded JSON body.

        Raises:
            ProviderError: HTTP status error, transport error or timeout,
                or a body that is not JSON
        """
        url = self._url(path)
        query = {**(params or {}), **self._auth_params()}
        try:
            response = self._get_client().get(url, params=query, headers=self._headers())
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("[%s] HTTP %d for %s", self.LOG_TAG, e.response.status_code, url)
            raise ProviderError(
                self.PROVIDER, f"HTTP {e.response.status_code} for {path or '/'}", e
            ) from e
        except (httpx.RequestError, RuntimeError, OSError) as e:
            # RuntimeError: "Cannot send a request, as the client has been closed"
            logger.warning("[%s] Request failed for %s: %s", self.LOG_TAG, url, e)
            raise ProviderError(self.PROVIDER, f"request failed: {e}", e) from e
        except ValueError as e:
            logger.warning("[%s] Invalid JSON from %s", self.LOG_TAG, url)
            raise ProviderError(self.PROVIDER, "response is not valid JSON", e) from e

    def close(self) -> None:
        """Close the HTTP client."""
        with self._client_lock:
            if self._client:
                self._client.close()
                self._client = None
