"""Per-request call context handed to hooks and handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class CallContext:
    """Short-lived record for one in-flight dispatch.

    ``source`` is the raw inbound request or event, ``platform_context`` the
    runtime's own invocation context when the platform provides one. ``state``
    is the only field hooks and handlers are meant to mutate, e.g. to store
    the authenticated identity in a pre-dispatch hook.
    """

    source: Any = None
    headers: dict[str, Any] = field(default_factory=dict)
    body: Any = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)
    platform_context: Any = None

    def header(self, name: str, default: Any = None) -> Any:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if str(key).lower() == wanted:
                return value
        return default
