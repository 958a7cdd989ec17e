"""Conversion between AppData and the JSON snapshot shape.

The snapshot keeps the camelCase field names of the browser storage
format so existing exports load unchanged::

    {"cards": [...], "groups": [{"id", "name", "members", "yearReadings"}], "settings": {...}}
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from utils.errors import SnapshotFormatError
from utils.reading_constants import CARDS_PER_MONTH, MONTHS, MONTHS_PER_YEAR, THEMES
from utils.readings import (
    AppData,
    AppSettings,
    Card,
    Group,
    GroupMember,
    MonthReading,
    PersonYearReading,
    freeze_mapping,
)

# ============= Encoding =============


def card_to_dict(card: Card) -> dict[str, str]:
    return {
        "id": card.id,
        "name": card.name,
        "shortDescription": card.short_text,
        "longDescription": card.long_text,
    }


def reading_to_dict(reading: PersonYearReading) -> dict[str, Any]:
    # Trailing empty slots are dropped and gaps become null, like a sparse JS array.
    slots = list(reading.readings)
    while slots and slots[-1] is None:
        slots.pop()
    payload: dict[str, Any] = {
        "personName": reading.person_name,
        "year": reading.year,
        "readings": [
            None
            if slot is None
            else {"month": slot.month_name, "cards": [card_to_dict(card) for card in slot.cards]}
            for slot in slots
        ],
    }
    if reading.completed_at is not None:
        payload["completedAt"] = reading.completed_at.isoformat()
    return payload


def group_to_dict(group: Group) -> dict[str, Any]:
    return {
        "id": group.id,
        "name": group.name,
        "members": [
            {"name": member.name, "joinedYears": sorted(member.joined_years)}
            for member in group.members
        ],
        "yearReadings": {
            str(year): {person: reading_to_dict(reading) for person, reading in people.items()}
            for year, people in group.year_readings.items()
        },
    }


def snapshot_to_dict(data: AppData) -> dict[str, Any]:
    """Serialize the whole application state to JSON-compatible primitives."""
    settings: dict[str, Any] = {"theme": data.settings.theme}
    if data.settings.last_selected_group is not None:
        settings["lastSelectedGroup"] = data.settings.last_selected_group
    if data.settings.last_selected_year is not None:
        settings["lastSelectedYear"] = data.settings.last_selected_year
    return {
        "cards": [card_to_dict(card) for card in data.cards],
        "groups": [group_to_dict(group) for group in data.groups],
        "settings": settings,
    }


# ============= Decoding =============


def _require(value: Any, expected: type | tuple[type, ...], what: str) -> Any:
    if not isinstance(value, expected):
        raise SnapshotFormatError(f"{what} has unexpected type {type(value).__name__}")
    return value


def _text(value: Any, default: str = "") -> str:
    # Only absent or null fields take the default; an empty string is kept.
    return default if value is None else str(value)


def card_from_dict(payload: Any) -> Card:
    payload = _require(payload, dict, "card")
    card_id = _require(payload.get("id"), str, "card id")
    return Card(
        id=card_id,
        name=_text(payload.get("name"), card_id),
        short_text=_text(payload.get("shortDescription")),
        long_text=_text(payload.get("longDescription")),
    )


def _month_from_dict(index: int, payload: Any) -> MonthReading | None:
    if payload is None:
        return None
    payload = _require(payload, dict, f"{MONTHS[index]} reading")
    cards = tuple(card_from_dict(entry) for entry in _require(payload.get("cards"), list, "cards"))
    if len(cards) != CARDS_PER_MONTH:
        raise SnapshotFormatError(f"{MONTHS[index]} reading holds {len(cards)} cards")
    return MonthReading(month_index=index, cards=cards)


def reading_from_dict(person: str, year: int, payload: Any) -> PersonYearReading:
    payload = _require(payload, dict, f"reading for {person}")
    raw_slots = _require(payload.get("readings", []), list, "readings")
    if len(raw_slots) > MONTHS_PER_YEAR:
        raise SnapshotFormatError(f"Reading for {person} has {len(raw_slots)} months")
    slots = [_month_from_dict(index, entry) for index, entry in enumerate(raw_slots)]
    slots.extend([None] * (MONTHS_PER_YEAR - len(slots)))

    completed_at = None
    raw_completed = payload.get("completedAt")
    if raw_completed:
        try:
            completed_at = datetime.fromisoformat(_require(raw_completed, str, "completedAt"))
        except ValueError as exc:
            raise SnapshotFormatError(f"Invalid completedAt for {person}: {raw_completed}") from exc

    return PersonYearReading(
        person_name=str(payload.get("personName") or person),
        year=year,
        readings=tuple(slots),
        completed_at=completed_at,
    )


def group_from_dict(payload: Any) -> Group:
    payload = _require(payload, dict, "group")
    group_id = _require(payload.get("id"), str, "group id")
    members = tuple(
        GroupMember(
            name=str(_require(member, dict, "member").get("name", "")),
            joined_years=frozenset(int(year) for year in member.get("joinedYears", [])),
        )
        for member in _require(payload.get("members", []), list, "members")
    )

    year_readings = {}
    for raw_year, people in _require(payload.get("yearReadings", {}), dict, "yearReadings").items():
        year = int(raw_year)
        year_readings[year] = freeze_mapping(
            {
                person: reading_from_dict(person, year, reading)
                for person, reading in _require(people, dict, f"year {raw_year}").items()
            }
        )

    return Group(
        id=group_id,
        name=str(payload.get("name", "")),
        members=members,
        year_readings=freeze_mapping(year_readings),
    )


def settings_from_dict(payload: Any) -> AppSettings:
    if not isinstance(payload, dict):
        return AppSettings()
    theme = payload.get("theme")
    last_year = payload.get("lastSelectedYear")
    last_group = payload.get("lastSelectedGroup")
    return AppSettings(
        theme=theme if theme in THEMES else AppSettings.theme,
        last_selected_group=str(last_group) if last_group is not None else None,
        last_selected_year=int(last_year) if last_year is not None else None,
    )


def snapshot_from_dict(payload: Any) -> AppData:
    """
    Rebuild application state from a decoded snapshot.

    Raises:
        SnapshotFormatError: If the payload does not describe valid application data
    """
    payload = _require(payload, dict, "snapshot")
    try:
        cards = tuple(card_from_dict(entry) for entry in _require(payload.get("cards", []), list, "cards"))
        groups = tuple(
            group_from_dict(entry) for entry in _require(payload.get("groups", []), list, "groups")
        )
        settings = settings_from_dict(payload.get("settings"))
    except SnapshotFormatError:
        raise
    except (TypeError, ValueError, AttributeError) as exc:
        raise SnapshotFormatError(f"Malformed snapshot: {exc}") from exc
    return AppData(cards=cards, groups=groups, settings=settings)


__all__ = [
    "card_from_dict",
    "card_to_dict",
    "group_from_dict",
    "group_to_dict",
    "reading_from_dict",
    "reading_to_dict",
    "settings_from_dict",
    "snapshot_from_dict",
    "snapshot_to_dict",
]
