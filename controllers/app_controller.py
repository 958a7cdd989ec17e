"""
Reading App Controller - Application logic behind the reading journal.

The controller owns the single AppData root. Every mutation goes through a
repository that returns a new root, the controller swaps its reference, and a
debounced flush persists the whole snapshot shortly afterwards. The UI layer
only talks to this class.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from loguru import logger

from repositories.card_repository import CardRepository, get_card_repository
from repositories.group_repository import GroupRepository, get_group_repository
from repositories.reading_repository import ReadingRepository, get_reading_repository
from services.card_selection_service import CardSelectionSession
from services.reading_view_service import (
    MonthlyReadings,
    ReadingViewService,
    get_reading_view_service,
)
from services.state_service import StateService
from utils.debounced_flush import DebouncedFlush, TimerFactory
from utils.reading_constants import AUTOSAVE_DEBOUNCE_SECONDS, LAST_MONTH_INDEX, THEMES
from utils.reading_stats import (
    CardFrequency,
    LibrarySummary,
    RankingFilter,
    rank_cards,
    summarize_library,
)
from utils.readings import AppData, Card, Group, PersonYearReading


class ReadingAppController:

    def __init__(
        self,
        state_service: StateService | None = None,
        card_repository: CardRepository | None = None,
        group_repository: GroupRepository | None = None,
        reading_repository: ReadingRepository | None = None,
        view_service: ReadingViewService | None = None,
        autosave_delay: float = AUTOSAVE_DEBOUNCE_SECONDS,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        # Services and repositories
        self.state_service = state_service or StateService()
        self.card_repo = card_repository or get_card_repository()
        self.group_repo = group_repository or get_group_repository()
        self.reading_repo = reading_repository or get_reading_repository()
        self.view_service = view_service or get_reading_view_service()

        # Application state
        self._data: AppData = self.state_service.load()
        self._autosave = DebouncedFlush(self._persist, delay=autosave_delay, timer_factory=timer_factory)

    @property
    def data(self) -> AppData:
        return self._data

    def _apply(self, data: AppData) -> None:
        if data is self._data:
            return
        self._data = data
        self._autosave.schedule()

    def _persist(self) -> None:
        self.state_service.save(self._data)

    # ============= Persistence =============

    @property
    def has_pending_changes(self) -> bool:
        return self._autosave.pending

    def flush(self) -> bool:
        """Write any pending changes now. Returns True if a write happened."""
        return self._autosave.flush_now()

    def close(self) -> None:
        logger.info("Flushing reading journal before exit")
        self.flush()

    # ============= Card Catalog =============

    def import_cards(self, entries: Any) -> tuple[Card, ...]:
        """Replace the whole catalog with the given import records."""
        cards = self.card_repo.replace_all(entries)
        self._apply(replace(self._data, cards=cards))
        return cards

    def import_cards_json(self, text: str) -> tuple[Card, ...]:
        cards = self.card_repo.parse_import_payload(text)
        self._apply(replace(self._data, cards=cards))
        return cards

    def update_card(self, card: Card) -> None:
        cards = self.card_repo.update(self._data.cards, card)
        if cards is not self._data.cards:
            self._apply(replace(self._data, cards=cards))

    def lookup_card(self, card_id: str) -> Card | None:
        return self.card_repo.lookup(self._data.cards, card_id)

    # ============= Groups =============

    def get_group(self, group_id: str) -> Group | None:
        return self.group_repo.get_group(self._data.groups, group_id)

    def create_group(self, name: str) -> Group:
        groups = self.group_repo.create_group(self._data.groups, name)
        self._apply(replace(self._data, groups=groups))
        return groups[-1]

    def add_member(self, group_id: str, name: str, start_year: int) -> Group:
        groups = self.group_repo.add_member(self._data.groups, group_id, name, start_year)
        self._apply(replace(self._data, groups=groups))
        return self.group_repo.require_group(groups, group_id)

    def people(self, group_id: str) -> list[str]:
        """Distinct member names of a group, in roster order."""
        return self.group_repo.people(self.group_repo.require_group(self._data.groups, group_id))

    # ============= Reading Ledger =============

    def get_reading(self, group_id: str, year: int, person: str) -> PersonYearReading | None:
        return self.reading_repo.get_reading(self._data.groups, group_id, year, person)

    def used_card_ids(self, group_id: str, year: int, person: str, before_month: int) -> frozenset[str]:
        return self.reading_repo.used_card_ids(self._data.groups, group_id, year, person, before_month)

    def commit_month(
        self,
        group_id: str,
        year: int,
        person: str,
        month_index: int,
        cards: Sequence[Card],
    ) -> PersonYearReading:
        commit = self.reading_repo.commit_month(
            self._data.groups, group_id, year, person, month_index, cards
        )
        self._apply(replace(self._data, groups=commit.groups))
        return commit.reading

    def start_session(
        self,
        group_id: str,
        year: int,
        person: str,
        month_index: int | None = None,
    ) -> CardSelectionSession:
        """
        Open a selection session and remember the group/year as the last used.

        Without an explicit month the session resumes at the person's first
        unfilled month; a finished year opens already YEAR_COMPLETE.
        """
        self.group_repo.require_group(self._data.groups, group_id)
        year_complete = False
        if month_index is None:
            month_index = self.reading_repo.next_open_month(self.get_reading(group_id, year, person))
            if month_index is None:
                month_index, year_complete = LAST_MONTH_INDEX, True
        self.select_group(group_id)
        self.select_year(year)
        return CardSelectionSession(
            self,
            group_id,
            year,
            person,
            month_index=month_index,
            reading_repository=self.reading_repo,
            year_complete=year_complete,
        )

    # ============= Browsing and Analytics =============

    def available_years(self, group_id: str) -> list[int]:
        return self.view_service.available_years(self.get_group(group_id))

    def view_readings(
        self,
        group_id: str,
        year: int,
        people: Sequence[str] | None = None,
    ) -> list[PersonYearReading]:
        return self.view_service.readings_for(self.get_group(group_id), year, people)

    def view_readings_by_month(
        self,
        group_id: str,
        year: int,
        people: Sequence[str] | None = None,
    ) -> list[MonthlyReadings]:
        return self.view_service.readings_by_month(self.view_readings(group_id, year, people))

    def rank(self, ranking_filter: RankingFilter | None = None) -> list[CardFrequency]:
        return rank_cards(self._data.groups, ranking_filter)

    def summary(self) -> LibrarySummary:
        return summarize_library(self._data)

    # ============= Settings =============

    def toggle_theme(self) -> str:
        current = self._data.settings.theme
        theme = THEMES[(THEMES.index(current) + 1) % len(THEMES)] if current in THEMES else THEMES[0]
        self._apply(replace(self._data, settings=replace(self._data.settings, theme=theme)))
        return theme

    def select_group(self, group_id: str | None) -> None:
        if self._data.settings.last_selected_group == group_id:
            return
        self._apply(
            replace(self._data, settings=replace(self._data.settings, last_selected_group=group_id))
        )

    def select_year(self, year: int | None) -> None:
        if self._data.settings.last_selected_year == year:
            return
        self._apply(
            replace(self._data, settings=replace(self._data.settings, last_selected_year=year))
        )


_default_controller: ReadingAppController | None = None


def get_app_controller() -> ReadingAppController:
    """Return the shared application controller, loading the snapshot on first use."""
    global _default_controller
    if _default_controller is None:
        _default_controller = ReadingAppController()
    return _default_controller


def reset_app_controller() -> None:
    global _default_controller
    if _default_controller is not None:
        _default_controller.close()
    _default_controller = None
