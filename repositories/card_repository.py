"""
Card Repository - Data access layer for the fortune card catalog.

This module handles all catalog operations including:
- Importing a whole catalog from loosely-typed records
- Editing individual cards
- Card lookup by id

The catalog is an immutable tuple of Card values; every operation returns a
new tuple and leaves its input untouched.
"""

import json
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from loguru import logger

from utils.errors import InvalidImportShapeError
from utils.readings import Card


class CardRepository:
    """Repository for fortune card catalog operations."""

    # ============= Import Operations =============

    def replace_all(self, entries: Any) -> tuple[Card, ...]:
        """
        Build a fresh catalog from import records.

        Each record may carry ``name``, ``shortDescription``, ``longDescription``
        and optionally ``id``. Missing names fall back to a positional placeholder
        (``card-{i}`` / ``Card {i+1}``) and missing texts to empty strings.
        Individual records are coerced, never rejected.

        Args:
            entries: Sequence of import records

        Returns:
            The new catalog

        Raises:
            InvalidImportShapeError: If entries is not a sequence
        """
        if not self._is_record_sequence(entries):
            raise InvalidImportShapeError(
                f"Card import must be a list of cards, got {type(entries).__name__}"
            )

        cards: list[Card] = []
        seen_ids: dict[str, int] = {}
        for index, entry in enumerate(entries):
            card = self._coerce_entry(index, entry)
            card_id = self._disambiguate(card.id, seen_ids)
            if card_id != card.id:
                logger.warning(f"Card id '{card.id}' already imported; storing as '{card_id}'")
                card = replace(card, id=card_id)
            cards.append(card)

        logger.info(f"Imported {len(cards)} cards into the catalog")
        return tuple(cards)

    def parse_import_payload(self, text: str) -> tuple[Card, ...]:
        """
        Decode a JSON import payload and build a catalog from it.

        Raises:
            InvalidImportShapeError: If the text is not valid JSON or not a list
        """
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error(f"Invalid JSON in card import: {exc}")
            raise InvalidImportShapeError("Invalid JSON format. Please check your input.") from exc
        return self.replace_all(payload)

    @staticmethod
    def _is_record_sequence(entries: Any) -> bool:
        if isinstance(entries, (str, bytes, bytearray, Mapping)):
            return False
        return isinstance(entries, Sequence)

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    def _coerce_entry(self, index: int, entry: Any) -> Card:
        record = entry if isinstance(entry, Mapping) else {}
        name = self._text(record.get("name"))
        explicit_id = self._text(record.get("id"))
        return Card(
            id=explicit_id or name or f"card-{index}",
            name=name or f"Card {index + 1}",
            short_text=self._text(record.get("shortDescription")),
            long_text=self._text(record.get("longDescription")),
        )

    @staticmethod
    def _disambiguate(card_id: str, seen_ids: dict[str, int]) -> str:
        """Return ``card_id`` or, if already taken, the first free ``card_id-N``."""
        if card_id not in seen_ids:
            seen_ids[card_id] = 1
            return card_id
        suffix = seen_ids[card_id]
        candidate = card_id
        while candidate in seen_ids:
            suffix += 1
            candidate = f"{card_id}-{suffix}"
        seen_ids[card_id] = suffix
        seen_ids[candidate] = 1
        return candidate

    # ============= Card Operations =============

    def update(self, cards: tuple[Card, ...], card: Card) -> tuple[Card, ...]:
        """
        Replace the catalog entry that has the same id as ``card``.

        Returns the catalog unchanged when no entry matches.
        """
        if not any(existing.id == card.id for existing in cards):
            logger.debug(f"No catalog entry with id '{card.id}'; update ignored")
            return cards
        return tuple(card if existing.id == card.id else existing for existing in cards)

    def lookup(self, cards: tuple[Card, ...], card_id: str) -> Card | None:
        """Return the card with the given id, or None."""
        for card in cards:
            if card.id == card_id:
                return card
        return None


# Shared instance used by the application controller
_default_repository = None


def get_card_repository() -> CardRepository:
    """Get the default card repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = CardRepository()
    return _default_repository


def reset_card_repository() -> None:
    """
    Reset the global card repository instance.

    This is primarily useful for testing to ensure test isolation
    and prevent state leakage between tests.
    """
    global _default_repository
    _default_repository = None
