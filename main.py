#!/usr/bin/env python3
"""Entry point that loads the reading journal and reports what it holds."""

from __future__ import annotations

from loguru import logger

from controllers.app_controller import get_app_controller, reset_app_controller
from utils.constants import LOGS_DIR, ensure_base_dirs
from utils.logging_config import configure_logging


def main() -> None:
    ensure_base_dirs()
    configure_logging(LOGS_DIR)
    controller = get_app_controller()
    try:
        summary = controller.summary()
        logger.info(
            f"{summary.total_cards} fortune cards, {summary.total_groups} groups, "
            f"{summary.total_readings} readings, {summary.unique_people} people"
        )
        for group in controller.data.groups:
            logger.info(f"{group.name}: {', '.join(controller.people(group.id)) or 'no members yet'}")
        for position, entry in enumerate(controller.rank(), start=1):
            logger.info(f"{position:>2}. {entry.card.name} ({entry.count})")
    finally:
        reset_app_controller()


if __name__ == "__main__":
    main()
