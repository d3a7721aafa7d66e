"""Infrastructure layer exports."""

from .environment import (
    EventSource,
    InMemoryEventSource,
    InMemoryWidgetEnvironment,
    WidgetEnvironment,
    WidgetRuntime,
)
from .session import SessionClient
from .submissions import SubmissionClient

__all__ = [
    "EventSource",
    "InMemoryEventSource",
    "InMemoryWidgetEnvironment",
    "SessionClient",
    "SubmissionClient",
    "WidgetEnvironment",
    "WidgetRuntime",
]
