"""
Claude OAuth usage fetcher.

Reads the 5 hour / 7 day utilization windows of an OAuth account from the
Anthropic usage endpoint.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from app.config import settings
from app.exceptions import UpstreamError
from app.schemas.usage import ClaudeUsageResponse


ANTHROPIC_BETA = "oauth-2025-04-20"


class ClaudeUsageFetcher:
    """Fetches usage with a short-lived client per call, honouring the account proxy."""

    def __init__(
        self,
        usage_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.usage_url = usage_url or settings.anthropic_usage_url
        self.timeout = timeout or settings.upstream_timeout_seconds
        self.transport = transport

    def fetch_usage(self, access_token: str, proxy_url: Optional[str] = None) -> ClaudeUsageResponse:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "anthropic-beta": ANTHROPIC_BETA,
            "Accept": "application/json",
        }

        try:
            with httpx.Client(
                timeout=self.timeout,
                proxy=proxy_url or None,
                transport=self.transport,
            ) as client:
                response = client.get(self.usage_url, headers=headers)
        except httpx.HTTPError as e:
            raise UpstreamError(f"usage request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(
                f"usage API returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return ClaudeUsageResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise UpstreamError(f"usage response malformed: {e}", response.status_code, response.text) from e
