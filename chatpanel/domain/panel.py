"""Domain entities for the chat panel."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Literal


class ScriptStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ErrorState:
    """Fault slots owned by the panel.

    ``script`` outranks ``session`` which outranks ``integration`` when
    deciding what the overlay shows.
    """

    script: str | None = None
    session: str | None = None
    integration: str | None = None
    retryable: bool = False

    def update(self, **changes: Any) -> "ErrorState":
        return replace(self, **changes)

    @property
    def active(self) -> str | None:
        return self.session or self.integration

    @property
    def blocking(self) -> str | None:
        return self.script or self.active


@dataclass(frozen=True, slots=True)
class FactAction:
    """Fact hand-off passed to the host when a ``record_fact`` tool runs."""

    fact_id: str
    fact_text: str
    type: Literal["save"] = "save"


@dataclass(slots=True)
class PanelView:
    """Everything needed to draw the panel for the current state."""

    instance_key: int
    widget_hidden: bool
    error: str | None = None
    fallback_message: str | None = None
    on_retry: Callable[[], None] | None = None
    retry_label: str = "Restart chat"

    @property
    def widget_class(self) -> str:
        if self.widget_hidden:
            return "pointer-events-none opacity-0"
        return "block h-full w-full"
