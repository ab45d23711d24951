"""Color palette evoked by the color vocabulary of a text."""

import re
from collections import Counter
from typing import Dict, List

from ..analysis.models import ColorSwatch
from ..analysis.state import ProviderResult
from ..config.constants import COLOR_PALETTE, DOMINANT_COLOR_COUNT
from .base import BaseProvider


# Multi-word names must win over their single-word suffixes
COLOR_LEXICON: Dict[str, str] = {
    'sky blue': '#87CEEB',
    'navy blue': '#000080',
    'blood red': '#8A0303',
    'forest green': '#228B22',
    'blue': '#0000FF',
    'red': '#FF0000',
    'green': '#008000',
    'yellow': '#FFFF00',
    'orange': '#FFA500',
    'purple': '#800080',
    'violet': '#8F00FF',
    'pink': '#FFC0CB',
    'brown': '#8B4513',
    'black': '#000000',
    'white': '#FFFFFF',
    'gray': '#808080',
    'grey': '#808080',
    'silver': '#C0C0C0',
    'gold': '#FFD700',
    'golden': '#FFD700',
    'crimson': '#DC143C',
    'scarlet': '#FF2400',
    'amber': '#FFBF00',
    'azure': '#007FFF',
    'indigo': '#4B0082',
    'teal': '#008080',
    'turquoise': '#40E0D0',
    'emerald': '#50C878',
    'ivory': '#FFFFF0',
    'ebony': '#555D50',
    'ochre': '#CC7722',
    'copper': '#B87333',
    'bronze': '#CD7F32',
    'lavender': '#E6E6FA',
    'maroon': '#800000',
    'rust': '#B7410E',
    'olive': '#808000',
    'ash': '#B2BEB5',
    'charcoal': '#36454F',
    'cream': '#FFFDD0',
    'sapphire': '#0F52BA',
    'ruby': '#E0115F',
}

_COLOR_PATTERN = re.compile(
    r'\b(' + '|'.join(
        r'\s+'.join(re.escape(part) for part in name.split())
        for name in sorted(COLOR_LEXICON, key=len, reverse=True)
    ) + r')\b',
    re.IGNORECASE
)


class ColorPaletteProvider(BaseProvider):
    """Rank color words by how often they appear; the most frequent are dominant."""

    provider_id = COLOR_PALETTE
    payload_type = ColorSwatch

    def __init__(self, dominant_count: int = DOMINANT_COLOR_COUNT):
        self.dominant_count = dominant_count

    async def analyze(self, text: str) -> ProviderResult[List[ColorSwatch]]:
        counts: Counter = Counter()
        first_seen: Dict[str, int] = {}

        for match in _COLOR_PATTERN.finditer(text):
            name = ' '.join(match.group(1).lower().split())
            counts[name] += 1
            first_seen.setdefault(name, match.start())

        total = sum(counts.values())
        if total == 0:
            return ProviderResult.ok([])

        ranked = sorted(counts, key=lambda name: (-counts[name], first_seen[name]))
        swatches = [
            ColorSwatch(
                hex=COLOR_LEXICON[name],
                name=name,
                prominence=counts[name] / total,
                role='dominant' if rank < self.dominant_count else 'accent'
            )
            for rank, name in enumerate(ranked)
        ]
        return ProviderResult.ok(swatches)
