"""
HTTP Provider
=============

Posts the canonical prompt to a classification endpoint over httpx.

WIRE FORMAT:
- Request:  POST {url}  {"prompt", "seed", "temperature", "max_tokens"}
- Response: JSON object; its "content" string is the model output.
  A body without "content" is passed through as-is.

Timeouts, transport failures and non-2xx statuses map to explicit
ProviderErrorCodes. Nothing is raised to the caller.
"""

from __future__ import annotations
import time
from datetime import datetime, timezone
from typing import Optional

import httpx

from .base import (
    LLMProvider,
    ProviderVersion,
    ProviderResponse,
    ProviderErrorCode,
    InvocationParams,
)


class HttpProvider(LLMProvider):

    def __init__(
        self,
        url: str,
        model_id: str = "remote",
        client: Optional[httpx.Client] = None
    ):
        self._url = url
        self._client = client or httpx.Client()
        self._owns_client = client is None
        self._version = ProviderVersion(
            provider_id="http",
            model_id=model_id,
            api_version="1.0.0",
            supports_seed=True
        )

    @property
    def provider_id(self) -> str:
        return "http"

    def get_version(self) -> ProviderVersion:
        return self._version

    def invoke(self, prompt: str, params: InvocationParams) -> ProviderResponse:
        invoked_at = datetime.now(timezone.utc)
        start = time.perf_counter()

        def failed(code: ProviderErrorCode, message: str) -> ProviderResponse:
            return ProviderResponse.failed(
                code, message, self._version, invoked_at,
                (time.perf_counter() - start) * 1000, params.seed,
            )

        try:
            response = self._client.post(
                self._url,
                json={
                    "prompt": prompt,
                    "seed": params.seed,
                    "temperature": params.temperature,
                    "max_tokens": params.max_tokens,
                },
                timeout=params.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            return failed(ProviderErrorCode.TIMEOUT, f"Request timed out: {e}")
        except httpx.TransportError as e:
            return failed(ProviderErrorCode.NETWORK_ERROR, f"Transport error: {e}")

        if response.status_code == 429:
            return failed(ProviderErrorCode.RATE_LIMITED, "Provider rate limited the request")
        if response.is_error:
            return failed(ProviderErrorCode.API_ERROR, f"HTTP {response.status_code}: {response.text[:200]}")

        content = response.text
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and "content" in body:
            if not isinstance(body["content"], str):
                return failed(ProviderErrorCode.INVALID_RESPONSE, "'content' is not a string")
            content = body["content"]

        return ProviderResponse(
            success=True,
            content=content,
            provider_version=self._version,
            invoked_at=invoked_at,
            latency_ms=(time.perf_counter() - start) * 1000,
            seed_used=params.seed,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
