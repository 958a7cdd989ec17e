"""Reading-related constants shared across repositories and services."""

MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MONTHS_PER_YEAR = len(MONTHS)
CARDS_PER_MONTH = 4
LAST_MONTH_INDEX = MONTHS_PER_YEAR - 1

# Analytics
RANKING_LIMIT = 20

# Settings
THEMES = ("light", "dark")
DEFAULT_THEME = "light"

# Seconds of quiet before a pending snapshot write is flushed
AUTOSAVE_DEBOUNCE_SECONDS = 1.0

__all__ = [
    "MONTHS",
    "MONTHS_PER_YEAR",
    "CARDS_PER_MONTH",
    "LAST_MONTH_INDEX",
    "RANKING_LIMIT",
    "THEMES",
    "DEFAULT_THEME",
    "AUTOSAVE_DEBOUNCE_SECONDS",
]
