"""Base classes and utilities for analysis providers."""

import json
import re
from itertools import islice
from typing import Any, Dict, List, Optional

from ..analysis.registry import ProviderSpec
from ..analysis.state import ProviderResult
from ..config.constants import PROVIDER_TITLES


_PARAGRAPH_BREAK = re.compile(r'\n[ \t]*\n')
_WORD = re.compile(r"[A-Za-z0-9]+(?:['’][A-Za-z]+)*")
_TOKEN = re.compile(r"\S+")
_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def split_paragraphs(text: str) -> List[str]:
    """Split text into non-empty paragraphs separated by blank lines."""
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text.strip()) if p.strip()]


def paragraph_spans(text: str) -> List[tuple]:
    """(start, end) character offsets of each paragraph in text."""
    spans = []
    start = 0
    for match in _PARAGRAPH_BREAK.finditer(text):
        spans.append((start, match.start()))
        start = match.end()
    spans.append((start, len(text)))
    return [(s, e) for s, e in spans if text[s:e].strip()]


def find_words(text: str) -> List[str]:
    """Words in text, apostrophes kept inside words."""
    return _WORD.findall(text)


class BaseProvider:
    """Base class for all analysis providers."""

    provider_id: str = ""
    payload_type: type = object
    tab_id: Optional[str] = None

    async def analyze(self, text: str) -> ProviderResult:
        """
        Analyze text for this provider's category.

        Args:
            text: The input text

        Returns:
            ProviderResult with an ordered payload sequence
        """
        raise NotImplementedError("Subclasses must implement analyze()")

    def as_spec(self, tab_id: Optional[str] = None) -> ProviderSpec:
        """Describe this provider for a ProviderRegistry."""
        return ProviderSpec(
            provider_id=self.provider_id,
            title=PROVIDER_TITLES.get(self.provider_id, self.provider_id),
            payload_type=self.payload_type,
            analyze=self.analyze,
            tab_id=tab_id if tab_id is not None else self.tab_id
        )


def parse_json_object(content: str) -> Dict[str, Any]:
    """
    Decode the JSON object in a model reply.

    Replies may wrap the object in a markdown fence or surround it with
    prose; the outermost braces are tried when the whole body is not JSON.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    fenced = _FENCE.search(content)
    body = fenced.group(1).strip() if fenced else content.strip()

    candidates = [body]
    start, end = body.find('{'), body.rfind('}')
    if start != -1 and end > start:
        candidates.append(body[start:end + 1])

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    raise ValueError(f"No JSON object in model response: {content[:200]!r}")


def leading_words(text: str, max_words: int) -> str:
    """
    The start of text up to max_words words, cut at a word boundary.

    Only the head is kept, so character offsets into the excerpt are also
    offsets into text.
    """
    tokens = list(islice(_TOKEN.finditer(text), max_words + 1))
    if len(tokens) <= max_words:
        return text
    return text[:tokens[max_words - 1].end()]
