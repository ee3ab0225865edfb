"""
Diagnostics - observability and event tracking for injectors.
"""

import time
from typing import Any, Dict, List, Optional, Protocol
from enum import Enum
import dataclasses
import logging

logger = logging.getLogger("wirebox.diagnostics")


class DIEventType(Enum):
    """Types of injector events."""
    REGISTRATION = "registration"
    RESOLUTION_START = "resolution_start"
    RESOLUTION_SUCCESS = "resolution_success"
    RESOLUTION_FAILURE = "resolution_failure"
    INSTANTIATION = "instantiation"


@dataclasses.dataclass
class DIEvent:
    """A diagnostic event emitted by an injector."""
    type: DIEventType
    timestamp: float = dataclasses.field(default_factory=time.time)
    token: Optional[Any] = None
    injector: Optional[str] = None
    provider_name: Optional[str] = None
    duration: Optional[float] = None
    error: Optional[BaseException] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)


class DiagnosticListener(Protocol):
    """Interface for diagnostic listeners."""
    def on_event(self, event: DIEvent) -> None:
        """Called when an injector event occurs."""
        ...


class ConsoleDiagnosticListener:
    """Diagnostic listener that writes events to the ``wirebox.diagnostics`` logger."""
    def __init__(self, log_level: int = logging.DEBUG):
        self.log_level = log_level

    def on_event(self, event: DIEvent) -> None:
        where = f" [{event.injector}]" if event.injector else ""
        if event.type == DIEventType.REGISTRATION:
            logger.log(self.log_level, f"Registered provider '{event.provider_name}' for token={event.token}{where}")
        elif event.type == DIEventType.RESOLUTION_START:
            logger.log(self.log_level, f"Resolving token={event.token}{where}...")
        elif event.type == DIEventType.RESOLUTION_SUCCESS:
            logger.log(self.log_level, f"Resolved token={event.token} in {event.duration:.4f}s{where}")
        elif event.type == DIEventType.RESOLUTION_FAILURE:
            logger.log(logging.ERROR, f"Failed to resolve token={event.token}{where}: {event.error!r}")
        elif event.type == DIEventType.INSTANTIATION:
            deps = ", ".join(str(t) for t in event.metadata.get("dependency_tokens", ()))
            logger.log(self.log_level, f"Instantiated token={event.token} from [{deps}]{where}")


class DIDiagnostics:
    """Coordinator for diagnostic listeners."""
    def __init__(self):
        self._listeners: List[DiagnosticListener] = []

    @property
    def listeners(self) -> List[DiagnosticListener]:
        return list(self._listeners)

    def add_listener(self, listener: DiagnosticListener) -> None:
        """Add a diagnostic listener."""
        self._listeners.append(listener)

    def remove_listener(self, listener: DiagnosticListener) -> None:
        """Remove a previously added listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event_type: DIEventType, **kwargs) -> None:
        """Emit a diagnostic event to all listeners."""
        if not self._listeners:
            return
        event = DIEvent(type=event_type, **kwargs)
        for listener in self._listeners:
            try:
                listener.on_event(event)
            except Exception:
                # Listeners must never break resolution
                logger.exception("Diagnostic listener error")
