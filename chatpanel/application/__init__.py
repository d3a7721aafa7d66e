"""Application services."""

from .panel import LOADING_MESSAGE, QUIZ_APOLOGY, SCRIPT_UNAVAILABLE_MESSAGE, SURVEY_APOLOGY, PanelController

__all__ = [
    "LOADING_MESSAGE",
    "PanelController",
    "QUIZ_APOLOGY",
    "SCRIPT_UNAVAILABLE_MESSAGE",
    "SURVEY_APOLOGY",
]
