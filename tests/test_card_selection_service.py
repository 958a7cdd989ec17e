"""Tests for the month-by-month card selection workflow."""

from __future__ import annotations

from dataclasses import replace

import pytest
from test_helpers import make_cards

from services.card_selection_service import CardSelectionSession, SelectionState
from utils.errors import DuplicateCardReuseError, MonthOutOfRangeError, SelectionNotReadyError
from utils.readings import AppData


class StubLedgerOwner:
    """Holds AppData and commits through a real ReadingRepository."""

    def __init__(self, data: AppData, reading_repo) -> None:
        self.data = data
        self.reading_repo = reading_repo
        self.commits: list[int] = []

    def commit_month(self, group_id, year, person, month_index, cards):
        commit = self.reading_repo.commit_month(
            self.data.groups, group_id, year, person, month_index, cards
        )
        self.data = replace(self.data, groups=commit.groups)
        self.commits.append(month_index)
        return commit.reading


@pytest.fixture
def catalog():
    return tuple(make_cards(60))


@pytest.fixture
def owner(groups, catalog, reading_repo):
    return StubLedgerOwner(AppData(cards=catalog, groups=groups), reading_repo)


@pytest.fixture
def session(owner, reading_repo):
    return CardSelectionSession(owner, "g1", 2025, "Ann", reading_repository=reading_repo)


def test_picking_four_cards_makes_session_ready(session, catalog):
    assert session.state is SelectionState.AWAITING_SELECTION

    for card in catalog[:3]:
        assert session.pick(card)
        assert session.state is SelectionState.AWAITING_SELECTION
    assert session.pick(catalog[3])

    assert session.state is SelectionState.READY_TO_COMMIT
    assert [card.id for card in session.picked] == ["c0", "c1", "c2", "c3"]


def test_fifth_pick_is_ignored(session, catalog):
    for card in catalog[:4]:
        session.pick(card)

    assert session.pick(catalog[4]) is False
    assert len(session.picked) == 4


def test_same_card_cannot_be_picked_twice(session, catalog):
    assert session.pick(catalog[0])
    assert session.pick(catalog[0]) is False
    assert len(session.picked) == 1


def test_removing_fourth_card_returns_to_awaiting(session, catalog):
    for card in catalog[:4]:
        session.pick(card)

    assert session.remove("c2")
    assert session.state is SelectionState.AWAITING_SELECTION
    assert session.remove("c2") is False
    assert [card.id for card in session.picked] == ["c0", "c1", "c3"]


def test_clear_discards_picks(session, catalog):
    session.pick(catalog[0])
    session.pick(catalog[1])

    session.clear()

    assert session.picked == ()
    assert session.state is SelectionState.AWAITING_SELECTION


def test_commit_before_ready_raises(session, owner, catalog):
    session.pick(catalog[0])

    with pytest.raises(SelectionNotReadyError):
        session.commit()

    assert owner.commits == []
    assert len(session.picked) == 1


def test_commit_writes_ledger_and_advances(session, owner, catalog):
    for card in catalog[:4]:
        session.pick(card)

    reading = session.commit()

    assert owner.commits == [0]
    assert reading.month(0).card_ids == ("c0", "c1", "c2", "c3")
    assert session.month_index == 1
    assert session.month_name == "February"
    assert session.picked == ()
    assert session.state is SelectionState.AWAITING_SELECTION


def test_available_cards_exclude_used_and_picked(session, catalog):
    for card in catalog[:4]:
        session.pick(card)
    session.commit()

    session.pick(catalog[4])
    available_ids = {card.id for card in session.available_cards()}

    assert session.used_card_ids() == {"c0", "c1", "c2", "c3"}
    assert available_ids.isdisjoint({"c0", "c1", "c2", "c3", "c4"})
    assert len(available_ids) == len(catalog) - 5


def test_cards_drawn_earlier_in_year_cannot_be_picked(session, catalog):
    for card in catalog[:4]:
        session.pick(card)
    session.commit()

    assert session.pick(catalog[2]) is False
    assert session.picked == ()


def test_full_year_ends_in_year_complete(session, owner, catalog):
    for month in range(12):
        for card in catalog[month * 4 : month * 4 + 4]:
            assert session.pick(card)
        reading = session.commit()

    assert session.state is SelectionState.YEAR_COMPLETE
    assert reading.is_complete
    assert reading.completed_at is not None
    assert owner.commits == list(range(12))
    assert session.available_cards() == []
    assert session.pick(catalog[50]) is False
    with pytest.raises(SelectionNotReadyError):
        session.commit()


def test_ledger_rejection_keeps_picks(session, owner, catalog):
    for card in catalog[:4]:
        session.pick(card)
    session.commit()
    for card in catalog[4:8]:
        session.pick(card)

    # Someone else rewrites January with one of the picked cards first.
    owner.commit_month("g1", 2025, "Ann", 0, [catalog[4], catalog[20], catalog[21], catalog[22]])

    with pytest.raises(DuplicateCardReuseError):
        session.commit()

    assert session.month_index == 1
    assert len(session.picked) == 4


def test_session_can_start_mid_year(owner, reading_repo):
    session = CardSelectionSession(owner, "g1", 2025, "Ann", month_index=11, reading_repository=reading_repo)

    assert session.month_name == "December"


@pytest.mark.parametrize("month_index", [-1, 12])
def test_session_rejects_invalid_start_month(owner, reading_repo, month_index):
    with pytest.raises(MonthOutOfRangeError):
        CardSelectionSession(owner, "g1", 2025, "Ann", month_index=month_index, reading_repository=reading_repo)
