"""Errors raised by the catalog, registry and ledger operations.

Every error here is recoverable: the operation that raised it has not changed
any state, and the message is suitable for showing to the user.
"""

from __future__ import annotations

from collections.abc import Iterable


class ReadingError(ValueError):
    """Base class for rejected catalog, registry or ledger operations."""


class EmptyNameError(ReadingError):
    """A group or member name was blank after trimming."""

    def __init__(self, kind: str = "name") -> None:
        super().__init__(f"{kind.capitalize()} must not be empty")
        self.kind = kind


class InvalidImportShapeError(ReadingError):
    """The catalog import payload was not a sequence of records."""


class WrongCardCountError(ReadingError):
    """A month reading did not carry exactly the required number of cards."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"A month reading needs exactly {expected} cards, got {actual}")
        self.expected = expected
        self.actual = actual


class DuplicateCardReuseError(ReadingError):
    """One or more cards were already drawn by this person in the same year."""

    def __init__(self, card_ids: Iterable[str]) -> None:
        self.card_ids = tuple(card_ids)
        joined = ", ".join(self.card_ids)
        super().__init__(f"Cards already drawn this year: {joined}")


class MonthOutOfRangeError(ReadingError):
    """A month index fell outside 0-11."""

    def __init__(self, month_index: int) -> None:
        super().__init__(f"Month index must be between 0 and 11, got {month_index}")
        self.month_index = month_index


class SelectionNotReadyError(ReadingError):
    """A selection session was committed before enough cards were picked."""


class UnknownGroupError(ReadingError, LookupError):
    """No group exists with the given id."""

    def __init__(self, group_id: str) -> None:
        super().__init__(f"Unknown group: {group_id}")
        self.group_id = group_id


class SnapshotFormatError(ValueError):
    """A persisted snapshot could not be decoded into application data."""


__all__ = [
    "ReadingError",
    "EmptyNameError",
    "InvalidImportShapeError",
    "WrongCardCountError",
    "DuplicateCardReuseError",
    "MonthOutOfRangeError",
    "SelectionNotReadyError",
    "UnknownGroupError",
    "SnapshotFormatError",
]
