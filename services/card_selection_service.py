"""
Card Selection Service - Assembles and commits one month's reading.

A session is scoped to one group, year and person, and walks forward month by
month. Picks are limited to cards the person has not drawn elsewhere in the
year, so the ledger rarely has to reject a commit:

    AWAITING_SELECTION (0-3 picked) -> READY_TO_COMMIT (4 picked)
        -> commit() -> next month, or YEAR_COMPLETE after December
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol

from loguru import logger

from repositories.reading_repository import ReadingRepository, get_reading_repository
from utils.errors import MonthOutOfRangeError, SelectionNotReadyError
from utils.reading_constants import CARDS_PER_MONTH, LAST_MONTH_INDEX, MONTHS, MONTHS_PER_YEAR
from utils.readings import AppData, Card, PersonYearReading


class SelectionState(str, Enum):
    AWAITING_SELECTION = "awaiting_selection"
    READY_TO_COMMIT = "ready_to_commit"
    YEAR_COMPLETE = "year_complete"


class LedgerOwner(Protocol):
    """Holder of the current application data that can commit a month."""

    @property
    def data(self) -> AppData: ...

    def commit_month(
        self,
        group_id: str,
        year: int,
        person: str,
        month_index: int,
        cards: Sequence[Card],
    ) -> PersonYearReading: ...


class CardSelectionSession:
    """Transient workflow for one person's readings in one group and year."""

    def __init__(
        self,
        owner: LedgerOwner,
        group_id: str,
        year: int,
        person: str,
        month_index: int = 0,
        reading_repository: ReadingRepository | None = None,
        year_complete: bool = False,
    ) -> None:
        if not 0 <= month_index < MONTHS_PER_YEAR:
            raise MonthOutOfRangeError(month_index)
        self.owner = owner
        self.group_id = group_id
        self.year = year
        self.person = person
        self.reading_repo = reading_repository or get_reading_repository()
        self._month_index = month_index
        self._picked: list[Card] = []
        self._year_complete = year_complete

    # ============= State =============

    @property
    def month_index(self) -> int:
        return self._month_index

    @property
    def month_name(self) -> str:
        return MONTHS[self._month_index]

    @property
    def picked(self) -> tuple[Card, ...]:
        return tuple(self._picked)

    @property
    def state(self) -> SelectionState:
        if self._year_complete:
            return SelectionState.YEAR_COMPLETE
        if len(self._picked) == CARDS_PER_MONTH:
            return SelectionState.READY_TO_COMMIT
        return SelectionState.AWAITING_SELECTION

    def used_card_ids(self) -> frozenset[str]:
        """Ids the person drew in the months before the current one."""
        return self.reading_repo.used_card_ids(
            self.owner.data.groups, self.group_id, self.year, self.person, self._month_index
        )

    def _blocked_card_ids(self) -> frozenset[str]:
        # Every other filled month, so an overwrite of an earlier month is filtered too.
        return self.reading_repo.reserved_card_ids(
            self.owner.data.groups, self.group_id, self.year, self.person, self._month_index
        )

    def available_cards(self) -> list[Card]:
        """Catalog cards that can still be picked for the current month."""
        if self._year_complete:
            return []
        blocked = self._blocked_card_ids()
        picked_ids = {card.id for card in self._picked}
        return [
            card
            for card in self.owner.data.cards
            if card.id not in blocked and card.id not in picked_ids
        ]

    # ============= Transitions =============

    def pick(self, card: Card) -> bool:
        """
        Add a card to the current month.

        Returns False, leaving the session unchanged, when four cards are
        already picked, the year is complete, or the card was picked or drawn
        already.
        """
        if self.state is not SelectionState.AWAITING_SELECTION:
            logger.debug(f"Ignoring pick of {card.id}: session is {self.state.value}")
            return False
        if any(existing.id == card.id for existing in self._picked):
            logger.debug(f"Ignoring pick of {card.id}: already picked")
            return False
        if card.id in self._blocked_card_ids():
            logger.debug(f"Ignoring pick of {card.id}: already drawn by {self.person} in {self.year}")
            return False
        self._picked.append(card)
        return True

    def remove(self, card_id: str) -> bool:
        """Drop a picked card. Returns False if it was not picked."""
        for index, card in enumerate(self._picked):
            if card.id == card_id:
                del self._picked[index]
                return True
        return False

    def clear(self) -> None:
        """Discard the in-progress picks."""
        self._picked.clear()

    def commit(self) -> PersonYearReading:
        """
        Write the four picked cards to the ledger and move on.

        On success the picks are cleared and the session advances to the next
        month, or ends with YEAR_COMPLETE after December. If the ledger rejects
        the commit its error propagates and the picks are kept.

        Raises:
            SelectionNotReadyError: If fewer than four cards are picked or the
                year is already complete
        """
        if self.state is not SelectionState.READY_TO_COMMIT:
            raise SelectionNotReadyError(
                f"Pick {CARDS_PER_MONTH} cards before saving {self.month_name} "
                f"({len(self._picked)} picked)"
            )
        reading = self.owner.commit_month(
            self.group_id, self.year, self.person, self._month_index, tuple(self._picked)
        )
        self._picked.clear()
        if self._month_index == LAST_MONTH_INDEX:
            self._year_complete = True
            logger.info(f"Completed full year reading for {self.person}")
        else:
            self._month_index += 1
        return reading


__all__ = ["CardSelectionSession", "LedgerOwner", "SelectionState"]
