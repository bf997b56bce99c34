"""GitHub REST client wrapper.

Provides:
- https-only API base URL, no redirects
- bounded retries with backoff
- finite timeouts
- error translation to ActionError
"""

from __future__ import annotations

import asyncio
from urllib.parse import urlsplit

import httpx

from .config import DEFAULT_API_URL, ClientLimits
from .errors import ActionError, github_auth_forbidden


class GitHubClient:
    """Minimal GitHub REST client bound to one token."""

    def __init__(
        self,
        *,
        token: str,
        limits: ClientLimits,
        api_base_url: str = DEFAULT_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create a GitHub REST client.

        Args:
            token: Token sent as a bearer credential.
            limits: Timeouts/retry limits.
            api_base_url: GITHUB_API_URL of the runner; must be https.
            transport: Optional httpx transport for tests.
        """
        self._token = token
        self._limits = limits
        self._api_base_url = api_base_url.rstrip("/")
        self._transport = transport

        parts = urlsplit(self._api_base_url)
        if parts.scheme != "https" or not parts.netloc:
            raise ActionError(code="Config", message="GITHUB_API_URL must be an https URL")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _compute_backoff_s(self, attempt_index: int) -> float:
        # attempt_index: 1 for first retry, 2 for second retry...
        return min(self._limits.max_backoff_s, 0.5 * (2 ** (attempt_index - 1)))

    def _is_retryable_status(self, status_code: int) -> bool:
        return status_code == 429 or 500 <= status_code <= 599

    @staticmethod
    def _error_hint(resp: httpx.Response) -> str | None:
        try:
            payload = resp.json()
        except ValueError:
            return None
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            return payload["message"]
        return None

    async def request_json(
        self,
        *,
        method: str,
        path: str,
        json_body: dict | None = None,
    ) -> object:
        """Make a request and return decoded JSON."""
        url = f"{self._api_base_url}{path}"
        timeout = httpx.Timeout(
            timeout=self._limits.total_timeout_s,
            connect=self._limits.connect_timeout_s,
            read=self._limits.read_timeout_s,
        )

        async with httpx.AsyncClient(follow_redirects=False, timeout=timeout, transport=self._transport) as client:
            for attempt in range(1, self._limits.max_attempts + 1):
                last_attempt = attempt == self._limits.max_attempts
                try:
                    resp = await client.request(method, url, headers=self._headers(), json=json_body)
                except (httpx.TimeoutException, httpx.TransportError) as exc:
                    if not last_attempt:
                        await asyncio.sleep(self._compute_backoff_s(attempt))
                        continue
                    raise ActionError(code="Network", message="Network request failed") from exc

                if resp.status_code in (401, 403):
                    raise github_auth_forbidden(status_code=resp.status_code)

                if resp.status_code >= 400:
                    if not last_attempt and self._is_retryable_status(resp.status_code):
                        await asyncio.sleep(self._compute_backoff_s(attempt))
                        continue
                    raise ActionError(
                        code="GitHub",
                        message="GitHub request failed",
                        hint=self._error_hint(resp),
                        status_code=resp.status_code,
                    )

                try:
                    return resp.json()
                except (ValueError, RecursionError) as exc:
                    raise ActionError(code="GitHub", message="GitHub returned invalid JSON") from exc

        raise ActionError(code="Network", message="Request failed")
