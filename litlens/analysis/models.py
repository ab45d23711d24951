"""Payload models produced by analysis providers."""
from enum import Enum
from typing import Dict, Iterable, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class ColorSwatch(BaseModel):
    """One color evoked by the text."""

    model_config = ConfigDict(frozen=True)

    hex: str = Field(pattern=r'^#[0-9A-Fa-f]{6}$', description="Hex color code")
    name: str = Field(description="Color name")
    prominence: float = Field(ge=0.0, le=1.0, description="Share of all color mentions")
    role: Literal['dominant', 'accent'] = Field(default='dominant', description="Palette role")

    @property
    def prominence_percent(self) -> float:
        """Prominence as a percentage for display."""
        return self.prominence * 100


class DeviceType(str, Enum):
    """Literary devices a detector may report."""

    METAPHOR = "Metaphor"
    SIMILE = "Simile"
    ANALOGY = "Analogy"
    PERSONIFICATION = "Personification"
    ANTHROPOMORPHISM = "Anthropomorphism"
    ZOOMORPHISM = "Zoomorphism"
    ALLEGORY = "Allegory"
    JUXTAPOSITION = "Juxtaposition"
    ALLITERATION = "Alliteration"
    ASSONANCE = "Assonance"
    CONSONANCE = "Consonance"
    ONOMATOPOEIA = "Onomatopoeia"
    CACOPHONY = "Cacophony"
    EUPHONY = "Euphony"
    SIBILANCE = "Sibilance"
    HYPERBOLE = "Hyperbole"
    UNDERSTATEMENT = "Understatement"
    PARADOX = "Paradox"
    OXYMORON = "Oxymoron"
    IRONY = "Irony"
    FORESHADOWING = "Foreshadowing"
    FLASHBACK = "Flashback"
    ANAPHORA = "Anaphora"
    EPISTROPHE = "Epistrophe"
    POLYSYNDETON = "Polysyndeton"
    ASYNDETON = "Asyndeton"
    CHEKHOVS_GUN = "ChekhovsGun"
    IN_MEDIAS_RES = "InMediasRes"
    IMAGERY = "Imagery"
    SYMBOLISM = "Symbolism"
    MOTIF = "Motif"
    PATHETIC_FALLACY = "PatheticFallacy"
    METONYMY = "Metonymy"
    SYNECDOCHE = "Synecdoche"
    APOSTROPHE = "Apostrophe"
    ALLUSION = "Allusion"
    EUPHEMISM = "Euphemism"
    PUN = "Pun"


# Category order is display order
DEVICE_CATEGORIES: Dict[str, List[DeviceType]] = {
    'Comparison': [
        DeviceType.METAPHOR, DeviceType.SIMILE, DeviceType.ANALOGY,
        DeviceType.PERSONIFICATION, DeviceType.ANTHROPOMORPHISM, DeviceType.ZOOMORPHISM,
        DeviceType.ALLEGORY, DeviceType.JUXTAPOSITION, DeviceType.METONYMY,
        DeviceType.SYNECDOCHE, DeviceType.ALLUSION,
    ],
    'Sound & Rhythm': [
        DeviceType.ALLITERATION, DeviceType.ASSONANCE, DeviceType.CONSONANCE,
        DeviceType.ONOMATOPOEIA, DeviceType.CACOPHONY, DeviceType.EUPHONY,
        DeviceType.SIBILANCE,
    ],
    'Emphasis & Understatement': [
        DeviceType.HYPERBOLE, DeviceType.UNDERSTATEMENT, DeviceType.PARADOX,
        DeviceType.OXYMORON, DeviceType.IRONY, DeviceType.EUPHEMISM, DeviceType.PUN,
    ],
    'Structure & Plot': [
        DeviceType.FORESHADOWING, DeviceType.FLASHBACK, DeviceType.ANAPHORA,
        DeviceType.EPISTROPHE, DeviceType.POLYSYNDETON, DeviceType.ASYNDETON,
        DeviceType.CHEKHOVS_GUN, DeviceType.IN_MEDIAS_RES, DeviceType.APOSTROPHE,
    ],
    'Imagery & Symbolism': [
        DeviceType.IMAGERY, DeviceType.SYMBOLISM, DeviceType.MOTIF,
        DeviceType.PATHETIC_FALLACY,
    ],
}
OTHER_CATEGORY = 'Other'


def device_category(device_type: DeviceType) -> str:
    """Get the display category for a device type."""
    for category, members in DEVICE_CATEGORIES.items():
        if device_type in members:
            return category
    return OTHER_CATEGORY


class LiteraryDevice(BaseModel):
    """A single literary device instance found in the text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    device_type: DeviceType = Field(alias="deviceType")
    text_snippet: str = Field(alias="textSnippet")
    explanation: str = ""
    position: int = Field(default=0, ge=0, description="Character offset in the text")

    @property
    def category(self) -> str:
        return device_category(self.device_type)


def group_devices_by_category(
    devices: Iterable[LiteraryDevice]
) -> Dict[str, List[LiteraryDevice]]:
    """
    Group devices by display category.

    Categories follow DEVICE_CATEGORIES order (Other last); empty categories
    are omitted and devices keep their input order.
    """
    buckets: Dict[str, List[LiteraryDevice]] = {
        name: [] for name in [*DEVICE_CATEGORIES, OTHER_CATEGORY]
    }
    for device in devices:
        buckets[device.category].append(device)
    return {name: items for name, items in buckets.items() if items}


class ReadabilityPoint(BaseModel):
    """Readability score for one stretch of paragraphs."""

    model_config = ConfigDict(frozen=True)

    paragraph_index: int = Field(ge=0, description="Index of the first paragraph covered")
    score: float = Field(description="Flesch reading ease score")


class DialogueMetrics(BaseModel):
    """Per-turn signals behind a power score."""

    model_config = ConfigDict(frozen=True)

    is_question: bool = False
    interruption_count: int = Field(default=0, ge=0)
    word_count: int = Field(default=0, ge=0)
    hedge_to_intensifier_ratio: float = Field(
        default=0.0, ge=0.0,
        description="Intensifiers / (hedges + intensifiers); higher means more power"
    )
    topic_changed: bool = False


class Tactic(str, Enum):
    """Conversational power tactics."""

    WEAPONIZED_POLITENESS = "weaponizedPoliteness"
    EXCHANGE_TERMINATION = "exchangeTermination"


class DialogueTurn(BaseModel):
    """One chronological turn in a dialogue exchange."""

    model_config = ConfigDict(frozen=True)

    speaker_name: str
    power_score: int = Field(description="Nominally -5 (submissive) to +5 (dominant)")
    metrics: DialogueMetrics = Field(default_factory=DialogueMetrics)
    detected_tactic: Optional[Tactic] = None
