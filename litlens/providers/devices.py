"""Literary device detection: local rules, or an LLM via OpenRouter."""

import re
from typing import Any, Dict, List, Optional

import aiohttp
from jinja2 import Template
from pydantic import ValidationError

from ..analysis.models import DeviceType, LiteraryDevice
from ..analysis.state import ProviderResult
from ..config.constants import LITERARY_DEVICES
from ..utils.logging import get_logger
from .base import BaseProvider, leading_words, parse_json_object


logger = get_logger("providers.devices")


_SENTENCE = re.compile(r'[^.!?\n]+[.!?]*')
_WORD_SPAN = re.compile(r"[A-Za-z]+(?:'[A-Za-z]+)?")

_SIMILE_PATTERNS = [
    # "I like the cake" is a preference, not a comparison
    re.compile(
        r"\b(?!(?:i|you|we|they|would|do|did|don't|didn't)\b)\w+\s+like\s+(?:a|an|the)\s+\w+(?:\s+\w+)?",
        re.IGNORECASE
    ),
    re.compile(r"\bas\s+\w+\s+as\s+(?:a|an|the)\s+\w+", re.IGNORECASE),
]

ONOMATOPOEIA_WORDS = {
    'bang', 'boom', 'buzz', 'clang', 'clatter', 'click', 'crack', 'crash',
    'creak', 'drip', 'fizz', 'growl', 'hiss', 'hum', 'murmur', 'plop',
    'rustle', 'screech', 'sizzle', 'splash', 'thud', 'thump', 'tick', 'tock',
    'whoosh', 'whirr', 'zap',
}

_HYPERBOLE = re.compile(
    r"\b(?:a\s+(?:million|billion|thousand|hundred)\s+(?:times|years|miles|things)"
    r"|took\s+forever|waited\s+forever|tons\s+of|to\s+die\s+for"
    r"|(?:starving|dying)\s+to\s+death|weighs?\s+a\s+ton|older\s+than\s+dirt)\b",
    re.IGNORECASE
)

OXYMORONS = [
    'deafening silence', 'bittersweet', 'living dead', 'open secret',
    'cruel kindness', 'sweet sorrow', 'alone together', 'awfully good',
    'clearly confused', 'seriously funny', 'jumbo shrimp', 'original copy',
    'pretty ugly', 'terribly pleased', 'loud whisper',
]
_OXYMORON = re.compile(
    r'\b(?:' + '|'.join(r'\s+'.join(map(re.escape, o.split())) for o in OXYMORONS) + r')\b',
    re.IGNORECASE
)

_ALLITERATION_SKIP = {'a', 'an', 'the', 'of', 'and', 'to', 'in', 'on'}
MIN_ALLITERATION_RUN = 3


def _device(device_type: DeviceType, text: str, start: int, end: int, explanation: str) -> LiteraryDevice:
    return LiteraryDevice(
        device_type=device_type,
        text_snippet=text[start:end].strip(),
        explanation=explanation,
        position=start
    )


def find_similes(text: str) -> List[LiteraryDevice]:
    found = []
    for pattern in _SIMILE_PATTERNS:
        for match in pattern.finditer(text):
            found.append(_device(
                DeviceType.SIMILE, text, match.start(), match.end(),
                "Compares two unlike things explicitly using 'like' or 'as'."
            ))
    return found


def find_alliteration(text: str) -> List[LiteraryDevice]:
    found = []
    for sentence in _SENTENCE.finditer(text):
        run: List[re.Match] = []
        for word in _WORD_SPAN.finditer(sentence.group()):
            token = word.group().lower()
            if token in _ALLITERATION_SKIP:
                continue
            if run and token[0] == run[0].group()[0].lower():
                run.append(word)
                continue
            if len(run) >= MIN_ALLITERATION_RUN:
                found.append(_alliteration(text, sentence.start(), run))
            run = [word] if token[0].isalpha() and token[0] not in 'aeiou' else []
        if len(run) >= MIN_ALLITERATION_RUN:
            found.append(_alliteration(text, sentence.start(), run))
    return found


def _alliteration(text: str, offset: int, run: List[re.Match]) -> LiteraryDevice:
    letter = run[0].group()[0].lower()
    return _device(
        DeviceType.ALLITERATION, text, offset + run[0].start(), offset + run[-1].end(),
        f"Repeats the initial '{letter}' sound across {len(run)} nearby words."
    )


def find_anaphora(text: str) -> List[LiteraryDevice]:
    """Two or more consecutive sentences opening with the same two words."""
    found = []
    sentences = [m for m in _SENTENCE.finditer(text) if _WORD_SPAN.search(m.group())]

    def opening(match: re.Match) -> tuple:
        return tuple(w.lower() for w in _WORD_SPAN.findall(match.group())[:2])

    i = 0
    while i < len(sentences):
        j = i
        key = opening(sentences[i])
        while j + 1 < len(sentences) and len(key) == 2 and opening(sentences[j + 1]) == key:
            j += 1
        if j > i:
            found.append(_device(
                DeviceType.ANAPHORA, text, sentences[i].start(), sentences[j].end(),
                f"{j - i + 1} consecutive sentences open with '{' '.join(key)}'."
            ))
        i = j + 1
    return found


def find_onomatopoeia(text: str) -> List[LiteraryDevice]:
    return [
        _device(
            DeviceType.ONOMATOPOEIA, text, word.start(), word.end(),
            "The word imitates the sound it describes."
        )
        for word in _WORD_SPAN.finditer(text)
        if word.group().lower() in ONOMATOPOEIA_WORDS
    ]


def find_hyperbole(text: str) -> List[LiteraryDevice]:
    return [
        _device(
            DeviceType.HYPERBOLE, text, m.start(), m.end(),
            "Deliberate exaggeration for emphasis."
        )
        for m in _HYPERBOLE.finditer(text)
    ]


def find_oxymorons(text: str) -> List[LiteraryDevice]:
    return [
        _device(
            DeviceType.OXYMORON, text, m.start(), m.end(),
            "Pairs contradictory terms."
        )
        for m in _OXYMORON.finditer(text)
    ]


DETECTORS = [
    find_similes,
    find_alliteration,
    find_anaphora,
    find_onomatopoeia,
    find_hyperbole,
    find_oxymorons,
]


class LiteraryDeviceProvider(BaseProvider):
    """Rule-based detector for devices with reliable surface patterns."""

    provider_id = LITERARY_DEVICES
    payload_type = LiteraryDevice

    async def analyze(self, text: str) -> ProviderResult[List[LiteraryDevice]]:
        seen = set()
        devices = []
        for detector in DETECTORS:
            for device in detector(text):
                key = (device.device_type, device.position)
                if key not in seen:
                    seen.add(key)
                    devices.append(device)

        devices.sort(key=lambda d: (d.position, d.device_type.value))
        return ProviderResult.ok(devices)


DEVICE_SYSTEM_PROMPT = """You are a literary scholar with expert knowledge of rhetorical and literary devices. Your task is to analyze a given text and identify all instances of the following devices. For each device found, you must provide the text snippet, its position, and a brief explanation of why it qualifies as that device.

Here is the list of devices to search for:
{% for device in device_types %}- {{ device }}
{% endfor %}
Return your findings as a single JSON object with one key: "devices". The value of "devices" must be an array of objects, where each object has these exact keys: "deviceType", "textSnippet", "explanation", "position". "deviceType" must be one of the names listed above, and "position" is the character offset where the snippet starts."""

DEVICE_USER_PROMPT = """Text to analyze ({{ word_count }} words{% if truncated %}, only the opening is shown{% endif %}):
```
{{ content }}
```"""


class LLMDeviceProvider(BaseProvider):
    """Literary device detection delegated to an OpenRouter model."""

    provider_id = LITERARY_DEVICES
    payload_type = LiteraryDevice

    def __init__(self, client, model: str, temperature: float = 0.3, max_content_words: int = 5000):
        """
        Args:
            client: OpenRouterClient (anything with an async completion())
            model: Model to use for analysis (required)
            temperature: Sampling temperature
            max_content_words: Only the opening words of longer texts are sent
        """
        if not model:
            raise ValueError("No model selected for literary device analysis.")
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_content_words = max_content_words

    async def analyze(self, text: str) -> ProviderResult[List[LiteraryDevice]]:
        system_prompt = Template(DEVICE_SYSTEM_PROMPT).render(
            device_types=[d.value for d in DeviceType]
        )
        excerpt = leading_words(text, self.max_content_words)
        prompt = Template(DEVICE_USER_PROMPT).render(
            content=excerpt,
            word_count=len(text.split()),
            truncated=excerpt != text
        )

        try:
            response = await self.client.completion(
                model=self.model,
                prompt=prompt,
                system_prompt=system_prompt,
                temperature=self.temperature
            )
            data = parse_json_object(response)
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning(f"LLM device analysis failed: {e}")
            return ProviderResult.fail(f"Literary device analysis failed: {e}")

        return ProviderResult.ok(self._devices_from(data))

    def _devices_from(self, data: Dict[str, Any]) -> List[LiteraryDevice]:
        devices = []
        for raw in data.get('devices', []) if isinstance(data, dict) else []:
            device = self._parse_device(raw)
            if device is not None:
                devices.append(device)
        devices.sort(key=lambda d: d.position)
        return devices

    def _parse_device(self, raw: Any) -> Optional[LiteraryDevice]:
        try:
            return LiteraryDevice.model_validate(raw)
        except ValidationError as e:
            logger.debug(f"Skipping malformed device entry {raw!r}: {e.error_count()} errors")
            return None
