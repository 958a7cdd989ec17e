"""
Services package - Business logic layer.

This package exposes business services while avoiding heavy imports at module load time.
"""

from importlib import import_module
from typing import Any

__all__ = [
    "CardSelectionSession",
    "ReadingViewService",
    "SelectionState",
    "StateService",
    "StoreService",
    "get_reading_view_service",
    "get_state_service",
    "get_store_service",
]

_LAZY_MODULES = {
    "CardSelectionSession": "services.card_selection_service",
    "SelectionState": "services.card_selection_service",
    "ReadingViewService": "services.reading_view_service",
    "get_reading_view_service": "services.reading_view_service",
    "StateService": "services.state_service",
    "StoreService": "services.store_service",
    "get_store_service": "services.store_service",
}


def __getattr__(name: str) -> Any:
    if name in _LAZY_MODULES:
        module = import_module(_LAZY_MODULES[name])
        value = getattr(module, name)
        globals()[name] = value
        return value

    raise AttributeError(f"module 'services' has no attribute '{name}'")


def get_state_service():
    from services.state_service import StateService

    return StateService()
