"""Aggregate card frequencies and library totals from the reading ledger."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from repositories.reading_repository import ReadingRepository
from utils.reading_constants import MONTHS, RANKING_LIMIT
from utils.readings import AppData, Card, Group, MonthReading

# ============= Ranking filters =============


@dataclass(frozen=True)
class RankingFilter:
    """Restricts which readings a ranking counts. The base filter counts everything."""

    def accepts_group(self, group: Group) -> bool:
        return True

    def accepts_year(self, year: int) -> bool:
        return True

    def accepts_person(self, person: str) -> bool:
        return True

    def accepts_month(self, month: MonthReading) -> bool:
        return True


@dataclass(frozen=True)
class AllReadings(RankingFilter):
    pass


@dataclass(frozen=True)
class ByYear(RankingFilter):
    year: int

    def accepts_year(self, year: int) -> bool:
        return year == self.year


@dataclass(frozen=True)
class ByMonth(RankingFilter):
    month_name: str

    def accepts_month(self, month: MonthReading) -> bool:
        return month.month_name == self.month_name


@dataclass(frozen=True)
class ByPerson(RankingFilter):
    name: str

    def accepts_person(self, person: str) -> bool:
        return person == self.name


@dataclass(frozen=True)
class ByGroup(RankingFilter):
    group_id: str

    def accepts_group(self, group: Group) -> bool:
        return group.id == self.group_id


def build_filter(kind: str, value: str | int | None = None) -> RankingFilter:
    """
    Build a filter from a selector name and its value.

    Args:
        kind: One of "all", "year", "month", "person", "group"
        value: Year, month name, person name or group id for the selector

    Raises:
        ValueError: For an unknown selector, a missing value, or an unknown month
    """
    normalized = (kind or "all").strip().lower()
    if normalized == "all":
        return AllReadings()
    if value is None or value == "":
        raise ValueError(f"Filter '{normalized}' needs a value")
    if normalized == "year":
        return ByYear(int(value))
    if normalized == "month":
        if value not in MONTHS:
            raise ValueError(f"Unknown month: {value}")
        return ByMonth(str(value))
    if normalized == "person":
        return ByPerson(str(value))
    if normalized == "group":
        return ByGroup(str(value))
    raise ValueError(f"Unknown filter: {kind}")


# ============= Rankings =============


@dataclass(frozen=True)
class CardFrequency:
    card: Card
    count: int


def _matching_months(groups: Iterable[Group], ranking_filter: RankingFilter) -> Iterable[MonthReading]:
    for group, year, person, reading in ReadingRepository.iter_readings(groups):
        if not (
            ranking_filter.accepts_group(group)
            and ranking_filter.accepts_year(year)
            and ranking_filter.accepts_person(person)
        ):
            continue
        for month in reading.filled_months():
            if ranking_filter.accepts_month(month):
                yield month


def rank_cards(
    groups: Iterable[Group],
    ranking_filter: RankingFilter | None = None,
    limit: int = RANKING_LIMIT,
) -> list[CardFrequency]:
    """
    Rank cards by how many matching month readings contain them.

    Ties keep the order in which cards were first met while walking groups in
    registry order, years and people in insertion order, months 0-11, and
    cards in stored order.
    """
    ranking_filter = ranking_filter or AllReadings()
    counter: Counter[str] = Counter()
    first_seen: dict[str, Card] = {}
    for month in _matching_months(groups, ranking_filter):
        for card in month.cards:
            first_seen.setdefault(card.id, card)
            counter[card.id] += 1
    # most_common is stable, so equal counts stay in first-seen order.
    return [CardFrequency(first_seen[card_id], count) for card_id, count in counter.most_common(limit)]


# ============= Library summary =============


@dataclass(frozen=True)
class LibrarySummary:
    total_cards: int
    total_groups: int
    total_readings: int
    unique_people: int


def summarize_library(data: AppData) -> LibrarySummary:
    """Headline totals: catalog size, groups, person-year readings, distinct member names."""
    total_readings = sum(len(people) for group in data.groups for people in group.year_readings.values())
    people = {member.name for group in data.groups for member in group.members}
    return LibrarySummary(
        total_cards=len(data.cards),
        total_groups=len(data.groups),
        total_readings=total_readings,
        unique_people=len(people),
    )


__all__ = [
    "AllReadings",
    "ByGroup",
    "ByMonth",
    "ByPerson",
    "ByYear",
    "CardFrequency",
    "LibrarySummary",
    "RankingFilter",
    "build_filter",
    "rank_cards",
    "summarize_library",
]
