"""Immutable value types for the card catalog, group registry and reading ledger.

Nothing in here is ever mutated in place: repositories build new values with
``dataclasses.replace`` and fresh mappings, sharing every unchanged branch
with the previous structure.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import TypeVar

from utils.reading_constants import DEFAULT_THEME, MONTHS, MONTHS_PER_YEAR

K = TypeVar("K")
V = TypeVar("V")


def freeze_mapping(values: Mapping[K, V] | None = None) -> Mapping[K, V]:
    """Return a read-only view over a private copy of ``values``."""
    return MappingProxyType(dict(values or {}))


def _empty_slots() -> tuple[MonthReading | None, ...]:
    return (None,) * MONTHS_PER_YEAR


@dataclass(frozen=True)
class Card:
    """A fortune card from the catalog."""

    id: str
    name: str
    short_text: str = ""
    long_text: str = ""


@dataclass(frozen=True)
class GroupMember:
    name: str
    joined_years: frozenset[int] = frozenset()


@dataclass(frozen=True)
class MonthReading:
    """The four cards drawn by one person for one month."""

    month_index: int
    cards: tuple[Card, ...]

    @property
    def month_name(self) -> str:
        return MONTHS[self.month_index]

    @property
    def card_ids(self) -> tuple[str, ...]:
        return tuple(card.id for card in self.cards)


@dataclass(frozen=True)
class PersonYearReading:
    """One person's drawings for one year, one slot per month."""

    person_name: str
    year: int
    readings: tuple[MonthReading | None, ...] = field(default_factory=_empty_slots)
    completed_at: datetime | None = None

    @property
    def filled_count(self) -> int:
        return sum(1 for slot in self.readings if slot is not None)

    @property
    def is_complete(self) -> bool:
        return self.filled_count == MONTHS_PER_YEAR

    def month(self, month_index: int) -> MonthReading | None:
        return self.readings[month_index]

    def filled_months(self) -> list[MonthReading]:
        return [slot for slot in self.readings if slot is not None]


@dataclass(frozen=True)
class Group:
    """A named group, its roster, and its partition of the reading ledger.

    ``year_readings`` maps year -> person name -> PersonYearReading, keeping
    insertion order at both levels.
    """

    id: str
    name: str
    members: tuple[GroupMember, ...] = ()
    year_readings: Mapping[int, Mapping[str, PersonYearReading]] = field(
        default_factory=freeze_mapping
    )


@dataclass(frozen=True)
class AppSettings:
    theme: str = DEFAULT_THEME
    last_selected_group: str | None = None
    last_selected_year: int | None = None


@dataclass(frozen=True)
class AppData:
    """Root of the whole in-memory state; persisted as one snapshot."""

    cards: tuple[Card, ...] = ()
    groups: tuple[Group, ...] = ()
    settings: AppSettings = field(default_factory=AppSettings)


__all__ = [
    "AppData",
    "AppSettings",
    "Card",
    "Group",
    "GroupMember",
    "MonthReading",
    "PersonYearReading",
    "freeze_mapping",
]
