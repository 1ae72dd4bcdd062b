"""
Model Adapter Package

ARCHITECTURAL BOUNDARY:
=======================
Optional language-model fallback for the lens classifiers. The core
layers never import from here; they accept a plain callable, and only
the API server wires a provider in.

DIRECTION OF DEPENDENCY:
========================
caller -> adapter -> provider

DESIGN PRINCIPLES:
==================
1. Model outputs are ADVISORY: lenses re-check category and clamp confidence
2. Providers never raise; failures are explicit responses
3. Same prompt + same seed -> same mock output
"""

from .classifier import ProviderClassifier, classifier_from_settings
from .prompts import CanonicalPrompt, render_classification_prompt
from .providers import (
    LLMProvider,
    ProviderVersion,
    ProviderResponse,
    ProviderErrorCode,
    InvocationParams,
    HttpProvider,
    MockProvider,
)

__all__ = [
    'ProviderClassifier', 'classifier_from_settings',
    'CanonicalPrompt', 'render_classification_prompt',
    'LLMProvider', 'ProviderVersion', 'ProviderResponse', 'ProviderErrorCode',
    'InvocationParams', 'HttpProvider', 'MockProvider',
]
