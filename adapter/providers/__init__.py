"""
LLM Providers Package
=====================

Available providers:
- MockProvider: Deterministic mock for testing
- HttpProvider: httpx POST to a classification endpoint
"""

from .base import (
    LLMProvider,
    ProviderVersion,
    ProviderResponse,
    ProviderErrorCode,
    InvocationParams,
)
from .http import HttpProvider
from .mock import MockProvider

__all__ = [
    'LLMProvider',
    'ProviderVersion',
    'ProviderResponse',
    'ProviderErrorCode',
    'InvocationParams',
    'HttpProvider',
    'MockProvider',
]
