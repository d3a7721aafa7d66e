"""Domain layer definitions."""

from .panel import ErrorState, FactAction, PanelView, ScriptStatus

__all__ = [
    "ErrorState",
    "FactAction",
    "PanelView",
    "ScriptStatus",
]
