"""
Antigravity API Client

Thin httpx wrapper over the Cloud Code Assist endpoints used for tier and
quota lookups:
- :loadCodeAssist         -> subscription tier, ineligible tiers
- :fetchAvailableModels   -> per-model remaining quota
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from app.config import settings
from app.exceptions import UpstreamError
from app.schemas.antigravity import FetchAvailableModelsResponse, LoadCodeAssistResponse

logger = logging.getLogger(__name__)

USER_AGENT = "antigravity/1.11.9 linux/amd64"

CLIENT_METADATA = {
    "ideType": "ANTIGRAVITY",
    "platform": "PLATFORM_UNSPECIFIED",
    "pluginType": "GEMINI",
}


class AntigravityClient:
    """
    Cloud Code Assist client bound to one outbound proxy.

    Usage:
        with AntigravityClient(proxy_url) as client:
            tier = client.load_code_assist(access_token).get_tier()
    """

    def __init__(
        self,
        proxy_url: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.antigravity_base_url).rstrip("/")
        self.client = httpx.Client(
            timeout=timeout or settings.upstream_timeout_seconds,
            headers={"User-Agent": USER_AGENT},
            proxy=proxy_url or None,
            transport=transport,
        )

    def _post(self, method: str, access_token: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}:{method}"
        try:
            response = self.client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"{method} request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(
                f"{method} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"{method} returned invalid JSON", response.status_code, response.text) from e

        if not isinstance(data, dict):
            raise UpstreamError(f"{method} returned a non-object body", response.status_code, response.text)
        return data

    def load_code_assist(self, access_token: str) -> LoadCodeAssistResponse:
        """Get the account's tier information."""
        data = self._post("loadCodeAssist", access_token, {"metadata": CLIENT_METADATA})
        try:
            return LoadCodeAssistResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"loadCodeAssist response malformed: {e}") from e

    def fetch_available_models(self, access_token: str, project_id: str) -> FetchAvailableModelsResponse:
        """Get remaining quota per model for ``project_id``."""
        data = self._post("fetchAvailableModels", access_token, {"project": project_id})
        try:
            return FetchAvailableModelsResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"fetchAvailableModels response malformed: {e}") from e

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
