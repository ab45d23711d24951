"""Application constants and defaults."""

# API Configuration
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_DEVICE_MODEL = "x-ai/grok-4-fast"

# Provider identifiers
COLOR_PALETTE = "color-palette"
LITERARY_DEVICES = "literary-devices"
READABILITY = "readability"
POWER_BALANCE = "power-balance"

PROVIDER_IDS = [
    COLOR_PALETTE,
    LITERARY_DEVICES,
    READABILITY,
    POWER_BALANCE,
]

# Result tabs (overview fans out to every provider)
OVERVIEW_TAB = "overview"
PROVIDER_TABS = {
    COLOR_PALETTE: 'palette',
    LITERARY_DEVICES: 'devices',
    READABILITY: 'readability',
    POWER_BALANCE: 'dialogue',
}

# Chart viewport
DEFAULT_CHART_WIDTH = 600
DEFAULT_CHART_HEIGHT = 300
DEFAULT_CHART_PADDING = 50

# Power balance domain
POWER_SCORE_MIN = -5
POWER_SCORE_MAX = 5

# Readability domain floor/ceiling (Flesch reading ease)
READABILITY_MIN = 0
READABILITY_MAX = 100
READABILITY_TICK_COUNT = 5
DEFAULT_PARAGRAPHS_PER_POINT = 1

# Axis labels
MAX_SPEAKER_LABEL_CHARS = 10
MAX_UNTHINNED_LABELS = 10

# Palette
DOMINANT_COLOR_COUNT = 5

# Provider titles shown in panels
PROVIDER_TITLES = {
    COLOR_PALETTE: 'Color Palette',
    LITERARY_DEVICES: 'Literary Devices',
    READABILITY: 'Readability',
    POWER_BALANCE: 'Dialogue Power Dynamics',
}

# Empty-but-successful messages
EMPTY_MESSAGES = {
    COLOR_PALETTE: 'No color palette data available.',
    LITERARY_DEVICES: 'No literary devices found in the text.',
    READABILITY: 'Not enough text to generate a readability chart.',
    POWER_BALANCE: 'No dialogue data to display power balance.',
}
