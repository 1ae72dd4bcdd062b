"""
Provider Classifier
===================

Turns an LLMProvider into the lens fallback callback:

    (text, allowed categories) -> (category, confidence) | None

FLOW:
text + categories -> CanonicalPrompt -> provider.invoke -> JSON parse
                  -> category check -> verdict

Provider failures, unparseable output and categories outside the
allowed list all return None. The lens applies its own confidence
clamp afterwards; this module does not.
"""

from __future__ import annotations
import json
import logging
from typing import Dict, Optional, Sequence, Tuple

from .prompts import CanonicalPrompt
from .providers import HttpProvider, InvocationParams, LLMProvider, MockProvider

logger = logging.getLogger(__name__)


def _extract_json_object(content: str) -> Optional[Dict]:
    """Parse the content, or the outermost {...} span inside it."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        start, end = content.find("{"), content.rfind("}")
        if start < 0 or end <= start:
            return None
        try:
            data = json.loads(content[start:end + 1])
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


class ProviderClassifier:
    """
    Example:
        classifier = ProviderClassifier(MockProvider())
        processor = ThreeLensProcessor(fallback=classifier)
    """

    def __init__(self, provider: LLMProvider, params: Optional[InvocationParams] = None):
        self._provider = provider
        self._params = params or InvocationParams()

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    def close(self) -> None:
        self._provider.close()

    def __call__(self, text: str, categories: Sequence[str]) -> Optional[Tuple[str, float]]:
        prompt = CanonicalPrompt.create(text, categories)
        response = self._provider.invoke(prompt.prompt_text, self._params)
        if not response.success:
            logger.warning(
                "Provider %s failed (%s): %s",
                self._provider.provider_id, response.error_code.value, response.error_message
            )
            return None

        data = _extract_json_object(response.content)
        if data is None:
            logger.warning("Provider %s returned unparseable output", self._provider.provider_id)
            return None

        category = data.get("category")
        if category not in prompt.categories:
            return None
        try:
            confidence = float(data.get("confidence", 0.0))
        except (TypeError, ValueError):
            return None
        return category, confidence


def classifier_from_settings(
    provider: str,
    url: Optional[str] = None,
    timeout_seconds: float = 30.0,
    seed: int = 42
) -> Optional[ProviderClassifier]:
    """
    ``provider`` is "none", "mock" or "http". Returns None for "none".
    """
    params = InvocationParams(seed=seed, timeout_seconds=timeout_seconds)
    if provider == "none":
        return None
    if provider == "mock":
        return ProviderClassifier(MockProvider(), params)
    if provider == "http":
        if not url:
            raise ValueError("http fallback provider requires a url")
        return ProviderClassifier(HttpProvider(url), params)
    raise ValueError(f"Unknown fallback provider: {provider!r}")
