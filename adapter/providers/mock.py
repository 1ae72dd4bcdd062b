"""
Mock LLM Provider
=================

Deterministic mock provider for tests and offline runs.

GUARANTEES:
- Same (prompt, seed) -> identical response
- The chosen category is one of the categories listed in the prompt
- failure_mode makes every call fail with that code
"""

from __future__ import annotations
import hashlib
import json
from datetime import datetime, timezone
from typing import List, Optional

from .base import (
    LLMProvider,
    ProviderVersion,
    ProviderResponse,
    ProviderErrorCode,
    InvocationParams,
)


def prompt_categories(prompt: str) -> List[str]:
    """Category names listed as ``- name`` lines in a canonical prompt."""
    return [line[2:].strip() for line in prompt.splitlines() if line.startswith("- ")]


class MockProvider(LLMProvider):
    """
    Response is derived from hash(prompt + seed) for reproducibility.
    """

    def __init__(
        self,
        latency_ms: float = 0.0,
        failure_mode: Optional[ProviderErrorCode] = None
    ):
        """
        Args:
            latency_ms: Reported latency (no sleep)
            failure_mode: If set, all invocations fail with this error
        """
        self._latency_ms = latency_ms
        self._failure_mode = failure_mode
        self._version = ProviderVersion(
            provider_id="mock",
            model_id="mock-deterministic-v1",
            api_version="1.0.0",
            supports_seed=True
        )
        self.invocation_count = 0

    @property
    def provider_id(self) -> str:
        return "mock"

    def get_version(self) -> ProviderVersion:
        return self._version

    def invoke(self, prompt: str, params: InvocationParams) -> ProviderResponse:
        invoked_at = datetime.now(timezone.utc)
        self.invocation_count += 1

        if self._failure_mode is not None:
            return ProviderResponse.failed(
                self._failure_mode,
                f"Mock provider configured to fail: {self._failure_mode.value}",
                self._version, invoked_at, self._latency_ms, params.seed,
            )

        categories = prompt_categories(prompt)
        if not categories:
            return ProviderResponse.failed(
                ProviderErrorCode.INVALID_RESPONSE,
                "Prompt lists no categories",
                self._version, invoked_at, self._latency_ms, params.seed,
            )

        return ProviderResponse(
            success=True,
            content=self._generate_deterministic_response(prompt, params.seed, categories),
            provider_version=self._version,
            invoked_at=invoked_at,
            latency_ms=self._latency_ms,
            seed_used=params.seed,
        )

    @staticmethod
    def _generate_deterministic_response(prompt: str, seed: int, categories: List[str]) -> str:
        digest = hashlib.sha256(f"{prompt}|{seed}".encode()).hexdigest()
        choice = categories[int(digest[:8], 16) % len(categories)]
        # confidence in [0.50, 0.99]
        confidence = 0.5 + (int(digest[8:12], 16) % 50) / 100
        return json.dumps({"category": choice, "confidence": confidence}, sort_keys=True)
