"""Runtime configuration for the chat panel and its submission API."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Literal

ColorScheme = Literal["light", "dark"]

COLOR_SCHEMES: tuple[str, ...] = ("light", "dark")

WORKFLOW_PLACEHOLDER_PREFIX = "wf_replace"
DEFAULT_WORKFLOW_ID = "wf_replace_with_your_workflow_id"
WORKFLOW_MISSING_MESSAGE = "Set CHATKIT_WORKFLOW_ID in your environment."

WIDGET_ELEMENT = "openai-chatkit"
SCRIPT_LOADED_EVENT = "chatkit-script-loaded"
SCRIPT_ERROR_EVENT = "chatkit-script-error"

GREETING = "Hi! Ready to find the right skincare routine for you?"
PLACEHOLDER_INPUT = "Ask anything about your skin..."
STARTER_PROMPTS: list[dict[str, str]] = [
    {
        "label": "Take the skin survey",
        "prompt": "I'd like to take the skin survey.",
        "icon": "notebook",
    },
    {
        "label": "Quiz me",
        "prompt": "Give me a quick skincare quiz.",
        "icon": "circle-question",
    },
    {
        "label": "What can you do?",
        "prompt": "What can you do?",
        "icon": "sparkle",
    },
]


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def get_theme_config(scheme: ColorScheme) -> dict[str, Any]:
    """Widget theme overrides for the given color scheme."""

    dark = scheme == "dark"
    return {
        "color": {
            "grayscale": {"hue": 220, "tint": 6, "shade": -1 if dark else -4},
            "accent": {"primary": "#f1f5f9" if dark else "#0f172a", "level": 1},
        },
        "radius": "round",
    }


@dataclass(slots=True)
class PanelSettings:
    """Settings consumed by :class:`chatpanel.application.PanelController`."""

    workflow_id: str = DEFAULT_WORKFLOW_ID
    session_endpoint: str = "http://localhost:3000/api/create-session"
    api_base: str = "http://localhost:8000"
    script_timeout: float = 5.0
    debug: bool = False
    greeting: str = GREETING
    placeholder: str = PLACEHOLDER_INPUT
    starter_prompts: list[dict[str, str]] = field(default_factory=lambda: list(STARTER_PROMPTS))

    @classmethod
    def from_env(cls) -> "PanelSettings":
        timeout_ms = float(os.getenv("CHATKIT_SCRIPT_TIMEOUT_MS", "5000"))
        return cls(
            workflow_id=os.getenv("CHATKIT_WORKFLOW_ID", DEFAULT_WORKFLOW_ID).strip(),
            session_endpoint=os.getenv(
                "CHATKIT_SESSION_ENDPOINT", "http://localhost:3000/api/create-session"
            ),
            api_base=os.getenv("PANEL_API_BASE", "http://localhost:8000"),
            script_timeout=timeout_ms / 1000,
            debug=_flag("PANEL_DEBUG"),
        )

    @property
    def is_workflow_configured(self) -> bool:
        return bool(self.workflow_id) and not self.workflow_id.startswith(WORKFLOW_PLACEHOLDER_PREFIX)


__all__ = [
    "COLOR_SCHEMES",
    "ColorScheme",
    "PanelSettings",
    "SCRIPT_ERROR_EVENT",
    "SCRIPT_LOADED_EVENT",
    "WIDGET_ELEMENT",
    "WORKFLOW_MISSING_MESSAGE",
    "get_theme_config",
]
