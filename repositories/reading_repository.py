"""
Reading Repository - The reading ledger.

The ledger lives inside each group as ``year -> person -> PersonYearReading``.
This module owns every rule about it:
- a person never draws the same card twice in one year
- a filled month always holds exactly four cards
- ``completed_at`` is stamped once, when the twelfth month is filled

Commits never modify the structures they are given. They return a new groups
tuple that shares every untouched group, year and person with the old one, so
anyone holding the previous tuple keeps seeing a complete prior state.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from loguru import logger

from utils.errors import (
    DuplicateCardReuseError,
    EmptyNameError,
    MonthOutOfRangeError,
    UnknownGroupError,
    WrongCardCountError,
)
from utils.reading_constants import CARDS_PER_MONTH, MONTHS, MONTHS_PER_YEAR
from utils.readings import Card, Group, MonthReading, PersonYearReading, freeze_mapping


@dataclass(frozen=True)
class LedgerCommit:
    """Result of committing one month."""

    groups: tuple[Group, ...]
    reading: PersonYearReading


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ReadingRepository:
    """Repository for reading ledger queries and commits."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        """
        Initialize the reading repository.

        Args:
            clock: Source of the completion timestamp. Defaults to UTC now.
        """
        self._clock = clock or _utc_now

    # ============= Queries =============

    @staticmethod
    def _find_group(groups: Iterable[Group], group_id: str) -> Group | None:
        for group in groups:
            if group.id == group_id:
                return group
        return None

    def get_reading(
        self,
        groups: Iterable[Group],
        group_id: str,
        year: int,
        person: str,
    ) -> PersonYearReading | None:
        """Return the reading for (group, year, person), or None if never committed."""
        group = self._find_group(groups, group_id)
        if group is None:
            return None
        return group.year_readings.get(year, {}).get(person)

    def used_card_ids(
        self,
        groups: Iterable[Group],
        group_id: str,
        year: int,
        person: str,
        before_month: int,
    ) -> frozenset[str]:
        """
        Card ids the person drew in months strictly before ``before_month``.

        Cards may repeat across years and across people; only the same person's
        earlier months in the same year count.
        """
        reading = self.get_reading(groups, group_id, year, person)
        if reading is None:
            return frozenset()
        return frozenset(
            card.id
            for slot in reading.readings[: max(before_month, 0)]
            if slot is not None
            for card in slot.cards
        )

    def reserved_card_ids(
        self,
        groups: Iterable[Group],
        group_id: str,
        year: int,
        person: str,
        month_index: int,
    ) -> frozenset[str]:
        """Card ids used in every filled month of the year except ``month_index``."""
        reading = self.get_reading(groups, group_id, year, person)
        if reading is None:
            return frozenset()
        return frozenset(
            card.id
            for index, slot in enumerate(reading.readings)
            if slot is not None and index != month_index
            for card in slot.cards
        )

    @staticmethod
    def next_open_month(reading: PersonYearReading | None) -> int | None:
        """Index of the first unfilled month, or None when the year is complete."""
        if reading is None:
            return 0
        for index, slot in enumerate(reading.readings):
            if slot is None:
                return index
        return None

    @staticmethod
    def iter_readings(
        groups: Iterable[Group],
    ) -> Iterator[tuple[Group, int, str, PersonYearReading]]:
        """Yield (group, year, person, reading) in registry and insertion order."""
        for group in groups:
            for year, people in group.year_readings.items():
                for person, reading in people.items():
                    yield group, year, person, reading

    # ============= Commit =============

    def commit_month(
        self,
        groups: tuple[Group, ...],
        group_id: str,
        year: int,
        person: str,
        month_index: int,
        cards: Sequence[Card],
    ) -> LedgerCommit:
        """
        Write one month's four cards for a person.

        Re-committing a filled month replaces its cards. The new cards are
        checked against every other filled month of the year, so an overwrite
        cannot reintroduce a card drawn later in the year either.

        Raises:
            MonthOutOfRangeError: If month_index is outside 0-11
            EmptyNameError: If person is blank
            UnknownGroupError: If no group has the given id
            WrongCardCountError: If cards does not hold exactly four cards
            DuplicateCardReuseError: If a card repeats within the commit or was
                already drawn in another month of the same year
        """
        if not 0 <= month_index < MONTHS_PER_YEAR:
            raise MonthOutOfRangeError(month_index)
        if not person or not person.strip():
            raise EmptyNameError("person name")
        group = self._find_group(groups, group_id)
        if group is None:
            raise UnknownGroupError(group_id)
        cards = tuple(cards)
        if len(cards) != CARDS_PER_MONTH:
            raise WrongCardCountError(CARDS_PER_MONTH, len(cards))

        reserved = self.reserved_card_ids(groups, group_id, year, person, month_index)
        seen: set[str] = set()
        offending: list[str] = []
        for card in cards:
            if (card.id in reserved or card.id in seen) and card.id not in offending:
                offending.append(card.id)
            seen.add(card.id)
        if offending:
            raise DuplicateCardReuseError(offending)

        year_people = group.year_readings.get(year, {})
        reading = year_people.get(person) or PersonYearReading(person_name=person, year=year)

        slots = list(reading.readings)
        slots[month_index] = MonthReading(month_index=month_index, cards=cards)
        completed_at = reading.completed_at
        if completed_at is None and all(slot is not None for slot in slots):
            completed_at = self._clock()
            logger.info(f"{person} completed all {MONTHS_PER_YEAR} readings for {year}")

        updated_reading = replace(reading, readings=tuple(slots), completed_at=completed_at)
        updated_group = replace(
            group,
            year_readings=freeze_mapping(
                {
                    **group.year_readings,
                    year: freeze_mapping({**year_people, person: updated_reading}),
                }
            ),
        )
        updated_groups = tuple(updated_group if existing.id == group_id else existing for existing in groups)

        logger.info(f"Saved {MONTHS[month_index]} {year} reading for {person} in {group.name}")
        return LedgerCommit(groups=updated_groups, reading=updated_reading)


# Shared instance used by the application controller
_default_repository = None


def get_reading_repository() -> ReadingRepository:
    """Get the default reading repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = ReadingRepository()
    return _default_repository


def reset_reading_repository() -> None:
    """Reset the global reading repository instance."""
    global _default_repository
    _default_repository = None
