"""Dialogue power balance: who holds the floor, turn by turn."""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from ..analysis.models import DialogueMetrics, DialogueTurn, Tactic
from ..analysis.state import ProviderResult
from ..config.constants import POWER_BALANCE, POWER_SCORE_MIN, POWER_SCORE_MAX
from .base import BaseProvider, find_words, paragraph_spans


UNKNOWN_SPEAKER = "Unknown"

SPEECH_VERBS = [
    'said', 'asked', 'replied', 'answered', 'shouted', 'whispered', 'snapped',
    'muttered', 'murmured', 'cried', 'demanded', 'insisted', 'added', 'yelled',
    'barked', 'pleaded', 'told',
]
PRONOUNS = {'he', 'she', 'they', 'i', 'we', 'you', 'it', 'someone', 'everyone'}

HEDGES = [
    'maybe', 'perhaps', 'possibly', 'probably', 'might', 'could', 'i think',
    'i guess', 'i suppose', 'sort of', 'kind of', 'somewhat', 'just', 'a little',
]
INTENSIFIERS = [
    'absolutely', 'definitely', 'certainly', 'completely', 'totally', 'never',
    'always', 'must', 'clearly', 'obviously', 'really', 'very', 'now', 'immediately',
]
POLITE_MARKERS = [
    'please', 'with all due respect', "if you don't mind", 'kindly', "i'm afraid",
    'respectfully', 'no offense', "i'm sure you",
]
TERMINATION_MARKERS = [
    'enough', "we're done", 'we are done', "that's final", 'end of discussion',
    'this conversation is over', 'goodbye', 'get out', 'no more',
]
_COMMANDING = re.compile(r"\byou(?:'ll| will| must| need to| should)\b")
_STOPWORDS = {
    'that', 'this', 'with', 'have', 'from', 'your', 'what', 'there', 'they',
    'were', 'been', 'will', 'would', 'about', 'just', 'then', 'when', 'here',
}

_QUOTE = re.compile(r'["“]([^"”]+)["”]')
_VERBS = '|'.join(SPEECH_VERBS)
_NAME = r"([A-Z][A-Za-z'-]*)"
_AFTER_VERB_NAME = re.compile(rf"^\s*,?\s*(?:{_VERBS})\s+{_NAME}")
_AFTER_NAME_VERB = re.compile(rf"^\s*,?\s*{_NAME}\s+(?:{_VERBS})\b")
_BEFORE_NAME_VERB = re.compile(rf"{_NAME}\s+(?:{_VERBS})\s*[,:]?\s*$")

MIN_CONTENT_WORDS_FOR_TOPIC = 3
TOPIC_OVERLAP_THRESHOLD = 0.1
LONG_TURN_WORDS = 25
TERMINATION_MAX_WORDS = 4


@dataclass
class _RawTurn:
    speaker: str
    text: str
    paragraph: int


def _normalize(text: str) -> str:
    return text.lower().replace('’', "'")


def count_markers(text: str, markers: Sequence[str]) -> int:
    """Occurrences of any marker phrase in text, on word boundaries."""
    lowered = _normalize(text)
    return sum(
        len(re.findall(r'\b' + re.escape(marker) + r'\b', lowered))
        for marker in markers
    )


def _speaker_name(match: Optional[re.Match]) -> Optional[str]:
    if match and match.group(1).lower() not in PRONOUNS:
        return match.group(1)
    return None


def _attribute(before: str, after: str) -> Optional[str]:
    return (
        _speaker_name(_AFTER_VERB_NAME.search(after))
        or _speaker_name(_AFTER_NAME_VERB.search(after))
        or _speaker_name(_BEFORE_NAME_VERB.search(before))
    )


def _alternate(turns: List[_RawTurn]) -> str:
    """Unattributed turns go back to whoever spoke before the last speaker."""
    if len(turns) >= 2 and turns[-2].speaker != turns[-1].speaker:
        return turns[-2].speaker
    return UNKNOWN_SPEAKER


def extract_turns(text: str) -> List[_RawTurn]:
    """Pull quoted speech out of text and attribute each turn to a speaker."""
    spans = paragraph_spans(text)

    def paragraph_of(position: int) -> int:
        for index, (start, end) in enumerate(spans):
            if start <= position < end:
                return index
        return len(spans) - 1

    turns: List[_RawTurn] = []
    for match in _QUOTE.finditer(text):
        quote = ' '.join(match.group(1).split())
        if not quote:
            continue

        paragraph = paragraph_of(match.start())
        para_start, para_end = spans[paragraph]
        speaker = _attribute(text[para_start:match.start()], text[match.end():para_end])

        same_paragraph = bool(turns) and turns[-1].paragraph == paragraph
        if same_paragraph and speaker in (None, turns[-1].speaker):
            turns[-1].text = f"{turns[-1].text} {quote}"
            continue

        turns.append(_RawTurn(speaker or _alternate(turns), quote, paragraph))
    return turns


def _content_words(text: str) -> Set[str]:
    return {
        word for word in (w.lower() for w in find_words(text))
        if len(word) > 3 and word not in _STOPWORDS
    }


def _is_cut_off(text: str) -> bool:
    return text.rstrip().endswith(('—', '–', '--', '-'))


def _topic_changed(previous: Optional[_RawTurn], current: _RawTurn) -> bool:
    if previous is None:
        return False
    before, now = _content_words(previous.text), _content_words(current.text)
    if len(before) < MIN_CONTENT_WORDS_FOR_TOPIC or len(now) < MIN_CONTENT_WORDS_FOR_TOPIC:
        return False
    overlap = len(before & now) / len(before | now)
    return overlap < TOPIC_OVERLAP_THRESHOLD


def detect_tactic(turns: List[_RawTurn], index: int, metrics: DialogueMetrics) -> Optional[Tactic]:
    """Name the power tactic a turn uses, if any."""
    turn = turns[index]
    lowered = _normalize(turn.text)

    ends_exchange = count_markers(turn.text, TERMINATION_MARKERS) > 0
    if not ends_exchange and index == len(turns) - 1 and index > 0:
        ends_exchange = (
            metrics.word_count <= TERMINATION_MAX_WORDS
            and not _is_cut_off(turn.text)
            and turns[index - 1].speaker != turn.speaker
        )
    if ends_exchange and not metrics.is_question:
        return Tactic.EXCHANGE_TERMINATION

    if count_markers(turn.text, POLITE_MARKERS) > 0 and (
        count_markers(turn.text, INTENSIFIERS) > 0 or _COMMANDING.search(lowered)
    ):
        return Tactic.WEAPONIZED_POLITENESS

    return None


def score_turn(metrics: DialogueMetrics, was_cut_off: bool, has_markers: bool,
               tactic: Optional[Tactic]) -> int:
    """Combine turn signals into a power score clamped to [-5, 5]."""
    score = 0
    if metrics.is_question:
        score -= 1
    score += 2 * metrics.interruption_count
    if was_cut_off:
        score -= 1
    if has_markers:
        score += round((metrics.hedge_to_intensifier_ratio - 0.5) * 4)
    if metrics.topic_changed:
        score += 1
    if metrics.word_count >= LONG_TURN_WORDS:
        score += 1
    if tactic is Tactic.WEAPONIZED_POLITENESS:
        score += 1
    elif tactic is Tactic.EXCHANGE_TERMINATION:
        score += 2
    return max(POWER_SCORE_MIN, min(POWER_SCORE_MAX, score))


class PowerBalanceProvider(BaseProvider):
    """Score each dialogue turn from submissive (-5) to dominant (+5)."""

    provider_id = POWER_BALANCE
    payload_type = DialogueTurn

    async def analyze(self, text: str) -> ProviderResult[List[DialogueTurn]]:
        turns = extract_turns(text)

        results = []
        for index, turn in enumerate(turns):
            previous = turns[index - 1] if index > 0 else None
            hedges = count_markers(turn.text, HEDGES)
            intensifiers = count_markers(turn.text, INTENSIFIERS)
            marker_total = hedges + intensifiers

            interrupted_previous = (
                previous is not None
                and _is_cut_off(previous.text)
                and previous.speaker != turn.speaker
            )
            metrics = DialogueMetrics(
                is_question=turn.text.rstrip().endswith('?'),
                interruption_count=1 if interrupted_previous else 0,
                word_count=len(find_words(turn.text)),
                hedge_to_intensifier_ratio=intensifiers / marker_total if marker_total else 0.0,
                topic_changed=_topic_changed(previous, turn)
            )
            tactic = detect_tactic(turns, index, metrics)

            results.append(DialogueTurn(
                speaker_name=turn.speaker,
                power_score=score_turn(metrics, _is_cut_off(turn.text), marker_total > 0, tactic),
                metrics=metrics,
                detected_tactic=tactic
            ))

        return ProviderResult.ok(results)
