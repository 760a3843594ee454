"""Flow event system for streaming phase changes to external consumers.

Provides a lightweight callback mechanism that the flow controller emits events
through. Consumers (CLI progress output, a GUI host, a result window) register a
callback to observe phase transitions without modifying flow logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from sct.core.models import FlowPhase


@dataclass
class FlowEvent:
    """A state change emitted during a translation run.

    Attributes:
        phase: Phase the controller just entered.
        progress: Overall progress of the run, 0.0 to 1.0 (a pure function of phase).
        message: Human-readable status message.
        data: Optional payload (e.g. segment counts, the terminal error).
    """

    phase: FlowPhase
    progress: float
    message: str
    data: dict | None = field(default=None)


EventCallback = Callable[[FlowEvent], None]
