"""
Reading View Service - Read-only browsing of committed readings.

Supports the two orderings used when reviewing a group's year:
- person first: each selected person's twelve months
- month first: each month with every person's cards for it
"""

from collections.abc import Sequence
from dataclasses import dataclass

from utils.reading_constants import MONTHS
from utils.readings import Group, MonthReading, PersonYearReading


@dataclass(frozen=True)
class MonthlyReadings:
    """Every person's reading for one month."""

    month_index: int
    month_name: str
    entries: tuple[tuple[str, MonthReading], ...]


class ReadingViewService:
    """Service for presenting ledger contents."""

    def available_years(self, group: Group | None) -> list[int]:
        """Years with at least one reading, newest first."""
        if group is None:
            return []
        return sorted(group.year_readings.keys(), reverse=True)

    def readings_for(
        self,
        group: Group | None,
        year: int | None,
        people: Sequence[str] | None = None,
    ) -> list[PersonYearReading]:
        """
        Readings for one group and year.

        Args:
            group: Group to browse
            year: Year to browse
            people: Optional selection; its order is kept and people without
                a reading are skipped. Without a selection every person is
                returned in ledger order.
        """
        if group is None or year is None:
            return []
        year_data = group.year_readings.get(year, {})
        selected = list(people) if people else list(year_data.keys())
        return [year_data[person] for person in selected if person in year_data]

    def readings_by_month(self, readings: Sequence[PersonYearReading]) -> list[MonthlyReadings]:
        """Regroup person readings into twelve month rows, keeping person order."""
        rows: list[MonthlyReadings] = []
        for month_index, month_name in enumerate(MONTHS):
            entries: list[tuple[str, MonthReading]] = []
            for reading in readings:
                slot = reading.month(month_index)
                if slot is not None:
                    entries.append((reading.person_name, slot))
            rows.append(
                MonthlyReadings(month_index=month_index, month_name=month_name, entries=tuple(entries))
            )
        return rows


_default_view_service: ReadingViewService | None = None


def get_reading_view_service() -> ReadingViewService:
    """Return a shared ReadingViewService instance."""
    global _default_view_service
    if _default_view_service is None:
        _default_view_service = ReadingViewService()
    return _default_view_service


def reset_reading_view_service() -> None:
    global _default_view_service
    _default_view_service = None
