"""Tests for the reading ledger: commits, reuse checks and completion."""

import random

import pytest
from test_helpers import commit_year, make_cards

from utils.errors import (
    DuplicateCardReuseError,
    EmptyNameError,
    MonthOutOfRangeError,
    UnknownGroupError,
    WrongCardCountError,
)
from utils.readings import Card


@pytest.fixture
def cards() -> list[Card]:
    return make_cards(60)


# ============= Completion =============


def test_year_completes_on_twelfth_month(reading_repo, groups, cards, clock):
    """Scenario A: eleven months leave the year open, the twelfth completes it."""
    groups = commit_year(reading_repo, groups, "g1", 2025, "Ann", cards, months=range(11))

    reading = reading_repo.get_reading(groups, "g1", 2025, "Ann")
    assert reading.filled_count == 11
    assert reading.completed_at is None
    assert clock.calls == 0

    commit = reading_repo.commit_month(groups, "g1", 2025, "Ann", 11, cards[44:48])

    assert commit.reading.filled_count == 12
    assert commit.reading.is_complete
    assert commit.reading.completed_at is not None
    assert clock.calls == 1


def test_completed_at_is_never_cleared_or_restamped(reading_repo, groups, cards):
    groups = commit_year(reading_repo, groups, "g1", 2025, "Ann", cards)
    stamped = reading_repo.get_reading(groups, "g1", 2025, "Ann").completed_at

    # Overwrite March with cards nobody has drawn this year.
    commit = reading_repo.commit_month(groups, "g1", 2025, "Ann", 2, cards[48:52])

    assert commit.reading.completed_at == stamped
    assert [card.id for card in commit.reading.month(2).cards] == ["c48", "c49", "c50", "c51"]


def test_completion_requires_every_slot_not_just_december(reading_repo, groups, cards):
    commit = reading_repo.commit_month(groups, "g1", 2025, "Ann", 11, cards[:4])

    assert commit.reading.filled_count == 1
    assert commit.reading.completed_at is None


# ============= Validation =============


def test_reuse_of_earlier_card_is_rejected(reading_repo, groups, cards):
    """Scenario B: a card from January cannot be drawn again in February."""
    c1, c2, c3, c4 = cards[:4]
    groups = reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, [c1, c2, c3, c4]).groups

    with pytest.raises(DuplicateCardReuseError) as excinfo:
        reading_repo.commit_month(groups, "g1", 2025, "Ann", 1, [cards[4], c2, cards[5], cards[6]])

    assert excinfo.value.card_ids == (c2.id,)
    reading = reading_repo.get_reading(groups, "g1", 2025, "Ann")
    assert reading.filled_count == 1
    assert reading.month(1) is None


@pytest.mark.parametrize("count", [0, 3, 5])
def test_wrong_card_count_is_rejected(reading_repo, groups, cards, count):
    with pytest.raises(WrongCardCountError) as excinfo:
        reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, cards[:count])

    assert excinfo.value.actual == count
    assert reading_repo.get_reading(groups, "g1", 2025, "Ann") is None


def test_duplicate_within_one_commit_is_rejected(reading_repo, groups, cards):
    with pytest.raises(DuplicateCardReuseError) as excinfo:
        reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, [cards[0], cards[1], cards[0], cards[2]])

    assert excinfo.value.card_ids == ("c0",)


def test_overwrite_is_checked_against_later_months(reading_repo, groups, cards):
    groups = commit_year(reading_repo, groups, "g1", 2025, "Ann", cards, months=range(3))

    # c9 already sits in March, so rewriting January with it must fail.
    with pytest.raises(DuplicateCardReuseError):
        reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, [cards[9], cards[20], cards[21], cards[22]])


def test_overwrite_may_reuse_its_own_cards(reading_repo, groups, cards):
    groups = reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, cards[:4]).groups

    commit = reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, [cards[3], cards[2], cards[1], cards[10]])

    assert commit.reading.month(0).card_ids == ("c3", "c2", "c1", "c10")
    assert commit.reading.filled_count == 1


@pytest.mark.parametrize("month_index", [-1, 12])
def test_month_out_of_range(reading_repo, groups, cards, month_index):
    with pytest.raises(MonthOutOfRangeError):
        reading_repo.commit_month(groups, "g1", 2025, "Ann", month_index, cards[:4])


def test_unknown_group(reading_repo, groups, cards):
    with pytest.raises(UnknownGroupError):
        reading_repo.commit_month(groups, "missing", 2025, "Ann", 0, cards[:4])


def test_blank_person(reading_repo, groups, cards):
    with pytest.raises(EmptyNameError):
        reading_repo.commit_month(groups, "g1", 2025, "  ", 0, cards[:4])


# ============= Queries =============


def test_used_card_ids_only_counts_earlier_months(reading_repo, groups, cards):
    groups = commit_year(reading_repo, groups, "g1", 2025, "Ann", cards, months=range(3))

    assert reading_repo.used_card_ids(groups, "g1", 2025, "Ann", 0) == frozenset()
    assert reading_repo.used_card_ids(groups, "g1", 2025, "Ann", 1) == {"c0", "c1", "c2", "c3"}
    assert len(reading_repo.used_card_ids(groups, "g1", 2025, "Ann", 3)) == 12
    assert reading_repo.reserved_card_ids(groups, "g1", 2025, "Ann", 1) == {
        "c0", "c1", "c2", "c3", "c8", "c9", "c10", "c11",
    }


def test_cards_may_repeat_across_people_and_years(reading_repo, groups, cards):
    groups = reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, cards[:4]).groups
    groups = reading_repo.commit_month(groups, "g1", 2025, "Ann", 1, cards[4:8]).groups

    groups = reading_repo.commit_month(groups, "g1", 2025, "Ben", 1, cards[:4]).groups
    groups = reading_repo.commit_month(groups, "g1", 2026, "Ann", 1, cards[:4]).groups

    assert reading_repo.get_reading(groups, "g1", 2025, "Ben").month(1).card_ids == ("c0", "c1", "c2", "c3")
    assert reading_repo.get_reading(groups, "g1", 2026, "Ann").filled_count == 1


def test_next_open_month(reading_repo, groups, cards):
    assert reading_repo.next_open_month(None) == 0

    groups = commit_year(reading_repo, groups, "g1", 2025, "Ann", cards, months=range(2))
    reading = reading_repo.get_reading(groups, "g1", 2025, "Ann")
    assert reading_repo.next_open_month(reading) == 2

    groups = commit_year(reading_repo, groups, "g1", 2025, "Ann", cards[8:], months=range(2, 12))
    reading = reading_repo.get_reading(groups, "g1", 2025, "Ann")
    assert reading_repo.next_open_month(reading) is None


def test_iter_readings_follows_registry_and_insertion_order(reading_repo, groups, cards):
    groups = reading_repo.commit_month(groups, "g2", 2024, "Cleo", 0, cards[:4]).groups
    groups = reading_repo.commit_month(groups, "g1", 2026, "Ben", 0, cards[:4]).groups
    groups = reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, cards[:4]).groups
    groups = reading_repo.commit_month(groups, "g1", 2026, "Ann", 0, cards[:4]).groups

    order = [(group.id, year, person) for group, year, person, _ in reading_repo.iter_readings(groups)]

    assert order == [
        ("g1", 2026, "Ben"),
        ("g1", 2026, "Ann"),
        ("g1", 2025, "Ann"),
        ("g2", 2024, "Cleo"),
    ]


# ============= Structural sharing =============


def test_commit_leaves_previous_structure_untouched(reading_repo, groups, cards):
    before = groups

    commit = reading_repo.commit_month(before, "g1", 2025, "Ann", 0, cards[:4])

    assert reading_repo.get_reading(before, "g1", 2025, "Ann") is None
    assert before[0].year_readings == {}
    # The untouched group is shared, not copied.
    assert commit.groups[1] is before[1]
    assert commit.groups[0] is not before[0]


def test_year_readings_cannot_be_mutated_in_place(reading_repo, groups, cards):
    commit = reading_repo.commit_month(groups, "g1", 2025, "Ann", 0, cards[:4])

    with pytest.raises(TypeError):
        commit.groups[0].year_readings[2030] = {}


def test_random_commits_never_duplicate_a_card_within_a_year(reading_repo, groups):
    rng = random.Random(1234)
    pool = make_cards(30)

    for _ in range(300):
        month = rng.randrange(12)
        chosen = rng.sample(pool, 4)
        try:
            groups = reading_repo.commit_month(groups, "g1", 2025, "Ann", month, chosen).groups
        except DuplicateCardReuseError:
            continue

    reading = reading_repo.get_reading(groups, "g1", 2025, "Ann")
    drawn = [card.id for month in reading.filled_months() for card in month.cards]
    assert reading.filled_count > 0
    assert len(drawn) == len(set(drawn))
    assert all(len(month.cards) == 4 for month in reading.filled_months())
