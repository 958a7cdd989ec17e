"""
Group Repository - Data access layer for groups and their membership rosters.

Groups only grow: they are created empty and members are appended. Each group
also carries its own partition of the reading ledger, which this repository
creates empty and otherwise leaves to the reading repository.
"""

import uuid
from collections.abc import Callable
from dataclasses import replace

from loguru import logger

from utils.errors import EmptyNameError, UnknownGroupError
from utils.readings import Group, GroupMember


def _new_group_id() -> str:
    return uuid.uuid4().hex


class GroupRepository:
    """Repository for group registry operations."""

    def __init__(self, id_factory: Callable[[], str] | None = None):
        """
        Initialize the group repository.

        Args:
            id_factory: Callable producing fresh group ids. Defaults to uuid4 hex.
        """
        self._id_factory = id_factory or _new_group_id

    # ============= Lookup =============

    def get_group(self, groups: tuple[Group, ...], group_id: str) -> Group | None:
        for group in groups:
            if group.id == group_id:
                return group
        return None

    def require_group(self, groups: tuple[Group, ...], group_id: str) -> Group:
        group = self.get_group(groups, group_id)
        if group is None:
            raise UnknownGroupError(group_id)
        return group

    @staticmethod
    def people(group: Group) -> list[str]:
        """Distinct member names in roster order (a person's ledger identity)."""
        return list(dict.fromkeys(member.name for member in group.members))

    # ============= Mutations =============

    def create_group(self, groups: tuple[Group, ...], name: str) -> tuple[Group, ...]:
        """
        Append a new, empty group to the registry.

        Args:
            groups: Current registry
            name: Display name; surrounding whitespace is trimmed

        Returns:
            The new registry; the created group is its last element

        Raises:
            EmptyNameError: If the name is blank
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise EmptyNameError("group name")

        existing_ids = {group.id for group in groups}
        group_id = self._id_factory()
        while group_id in existing_ids:
            group_id = self._id_factory()

        group = Group(id=group_id, name=clean_name)
        logger.info(f"Created group '{clean_name}' ({group_id})")
        return (*groups, group)

    def add_member(
        self,
        groups: tuple[Group, ...],
        group_id: str,
        name: str,
        start_year: int,
    ) -> tuple[Group, ...]:
        """
        Append a member to a group's roster.

        Duplicate names are allowed; they share one reading history because the
        ledger is keyed by name.

        Raises:
            EmptyNameError: If the member name is blank
            UnknownGroupError: If no group has the given id
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise EmptyNameError("member name")
        group = self.require_group(groups, group_id)

        member = GroupMember(name=clean_name, joined_years=frozenset({int(start_year)}))
        updated = replace(group, members=(*group.members, member))
        logger.info(f"Added {clean_name} to {group.name} starting {start_year}")
        return tuple(updated if existing.id == group_id else existing for existing in groups)


# Shared instance used by the application controller
_default_repository = None


def get_group_repository() -> GroupRepository:
    """Get the default group repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = GroupRepository()
    return _default_repository


def reset_group_repository() -> None:
    """Reset the global group repository instance."""
    global _default_repository
    _default_repository = None
