"""
Repositories package - Data access layer.

This package contains repository classes that own the rules of the card catalog,
the group registry and the reading ledger, isolating the application controller
from how those structures are built and updated.
"""

from repositories.card_repository import CardRepository, get_card_repository
from repositories.group_repository import GroupRepository, get_group_repository
from repositories.reading_repository import LedgerCommit, ReadingRepository, get_reading_repository

__all__ = [
    "CardRepository",
    "GroupRepository",
    "LedgerCommit",
    "ReadingRepository",
    "get_card_repository",
    "get_group_repository",
    "get_reading_repository",
]
