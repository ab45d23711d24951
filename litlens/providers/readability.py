"""Readability trajectory: Flesch reading ease per stretch of paragraphs."""

import re
from typing import List, Optional

from ..analysis.models import ReadabilityPoint
from ..analysis.state import ProviderResult
from ..config.constants import READABILITY, DEFAULT_PARAGRAPHS_PER_POINT, READABILITY_MIN, READABILITY_MAX
from .base import BaseProvider, find_words, split_paragraphs


_SENTENCE_END = re.compile(r'[.!?]+')


def count_syllables(word: str) -> int:
    """Count syllables in a word (vowel-group heuristic)."""
    word = word.lower().strip()
    if not word:
        return 1

    # Silent trailing e
    word = re.sub(r"e$", "", word)

    syllable_count = 0
    prev_was_vowel = False
    for char in word:
        is_vowel = char in "aeiouy"
        if is_vowel and not prev_was_vowel:
            syllable_count += 1
        prev_was_vowel = is_vowel

    return max(1, syllable_count)


def flesch_reading_ease(text: str) -> Optional[float]:
    """
    Flesch reading ease (0-100, higher = easier), clamped.

    Returns:
        Score, or None when text contains no words
    """
    words = find_words(text)
    if not words:
        return None

    sentences = [s for s in _SENTENCE_END.split(text) if s.strip()]
    sentence_count = max(len(sentences), 1)
    syllables = sum(count_syllables(word) for word in words)

    score = (
        206.835
        - 1.015 * (len(words) / sentence_count)
        - 84.6 * (syllables / len(words))
    )
    return max(READABILITY_MIN, min(READABILITY_MAX, score))


class ReadabilityProvider(BaseProvider):
    """One readability point per group of paragraphs, in reading order."""

    provider_id = READABILITY
    payload_type = ReadabilityPoint

    def __init__(self, paragraphs_per_point: int = DEFAULT_PARAGRAPHS_PER_POINT):
        if paragraphs_per_point < 1:
            raise ValueError("paragraphs_per_point must be at least 1")
        self.paragraphs_per_point = paragraphs_per_point

    async def analyze(self, text: str) -> ProviderResult[List[ReadabilityPoint]]:
        paragraphs = split_paragraphs(text)
        points = []
        for start in range(0, len(paragraphs), self.paragraphs_per_point):
            chunk = '\n\n'.join(paragraphs[start:start + self.paragraphs_per_point])
            score = flesch_reading_ease(chunk)
            if score is None:
                continue
            points.append(ReadabilityPoint(paragraph_index=start, score=round(score, 2)))
        return ProviderResult.ok(points)
