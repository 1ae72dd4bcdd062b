"""
LLM Provider Abstraction Layer
==============================

Abstract interface for classification providers used as the lens
fallback.

BOUNDARY ENFORCEMENT:
- A provider holds no per-call state; one invoke is one request
- The seed in InvocationParams is the only source of variation
- Failures are explicit ProviderResponses, never raised
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from enum import Enum


class ProviderErrorCode(Enum):
    """Explicit failure codes for provider invocations."""
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"
    API_ERROR = "api_error"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class ProviderVersion:
    """Provider identity recorded with each response."""
    provider_id: str       # "mock" | "http"
    model_id: str
    api_version: str
    supports_seed: bool


@dataclass(frozen=True)
class ProviderResponse:
    """
    Immutable response from a provider.

    INVARIANT: Either (success=True, content set) or (success=False, error set)
    """
    success: bool
    content: Optional[str] = None

    error_code: Optional[ProviderErrorCode] = None
    error_message: Optional[str] = None

    provider_version: Optional[ProviderVersion] = None
    invoked_at: Optional[datetime] = None
    latency_ms: float = 0.0
    seed_used: Optional[int] = None

    def __post_init__(self):
        if self.success and self.content is None:
            raise ValueError("Successful response must have content")
        if not self.success and self.error_code is None:
            raise ValueError("Failed response must have error_code")

    @staticmethod
    def failed(
        code: ProviderErrorCode,
        message: str,
        version: Optional[ProviderVersion] = None,
        invoked_at: Optional[datetime] = None,
        latency_ms: float = 0.0,
        seed: Optional[int] = None
    ) -> ProviderResponse:
        return ProviderResponse(
            success=False,
            error_code=code,
            error_message=message,
            provider_version=version,
            invoked_at=invoked_at,
            latency_ms=latency_ms,
            seed_used=seed,
        )


@dataclass(frozen=True)
class InvocationParams:
    """
    Same params + same prompt = same result (where the provider honours seed).
    """
    seed: int = 42
    temperature: float = 0.0
    max_tokens: int = 256
    timeout_seconds: float = 30.0


class LLMProvider(ABC):
    """
    GUARANTEES:
    - Invocations are stateless
    - Failures are explicit ProviderResponse with error_code
    - Seed is passed through (whether honoured is provider-dependent)
    """

    @abstractmethod
    def invoke(self, prompt: str, params: InvocationParams) -> ProviderResponse:
        """MUST return ProviderResponse, never raise."""
        pass

    @abstractmethod
    def get_version(self) -> ProviderVersion:
        pass

    @property
    @abstractmethod
    def provider_id(self) -> str:
        pass

    def close(self) -> None:
        """Release any connection the provider holds. No-op by default."""
