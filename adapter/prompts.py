"""
Canonical Prompt Generation
===========================

Pure function from (text, allowed categories) to the classification
prompt sent to a provider.

INVARIANT: Same text + same categories (same order) -> same prompt_hash
No session state, no ledger context.
"""

from __future__ import annotations
from dataclasses import dataclass
import hashlib
from typing import Sequence, Tuple

MAX_PROMPT_TEXT = 2000


@dataclass(frozen=True)
class CanonicalPrompt:
    """
    Frozen prompt with hash for deterministic tracking.

    INVARIANT: Same text + categories -> same prompt_hash
    """
    categories: Tuple[str, ...]
    prompt_text: str
    prompt_hash: str

    @staticmethod
    def create(text: str, categories: Sequence[str]) -> CanonicalPrompt:
        """This is the ONLY way to create prompts."""
        categories = tuple(categories)
        prompt_text = render_classification_prompt(text, categories)
        return CanonicalPrompt(
            categories=categories,
            prompt_text=prompt_text,
            prompt_hash=hashlib.sha256(prompt_text.encode()).hexdigest(),
        )


def render_classification_prompt(text: str, categories: Sequence[str]) -> str:
    excerpt = (text or "").strip()[:MAX_PROMPT_TEXT]
    options = "\n".join(f"- {c}" for c in categories)
    return f"""You are classifying a development event.

EVENT TEXT:
{excerpt if excerpt else "(empty)"}

ALLOWED CATEGORIES:
{options}

Choose exactly one category from the list above.

OUTPUT FORMAT (JSON only, no prose):
{{"category": "<one allowed category>", "confidence": <number between 0 and 1>}}
"""
