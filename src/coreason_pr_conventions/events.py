import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Protocol

from coreason_pr_conventions.utils.logger import logger


class EventType(Enum):
    RUN_START = "run_start"
    CHECK_RUNNING = "check_running"
    CHECK_RESULT = "check_result"
    RUN_END = "run_end"
    ERROR = "error"


@dataclass
class ValidationEvent:
    type: EventType
    message: str
    timestamp: float = field(default_factory=time.time)
    payload: Dict[str, Any] = field(default_factory=dict)


class EventEmitter(Protocol):
    def emit(self, event: ValidationEvent) -> None:
        """Emits a validation event."""
        ...  # pragma: no cover


class LoguruEmitter:
    """Adapter that logs events to Loguru."""

    def emit(self, event: ValidationEvent) -> None:
        if event.type == EventType.ERROR:
            logger.error(f"[{event.type.value}] {event.message} | {event.payload}")
        elif event.type == EventType.CHECK_RESULT:
            status = event.payload.get("status", "unknown")
            if status == "fail":
                logger.error(f"[{event.type.value}] {event.message} | {event.payload}")
            else:
                logger.info(f"[{event.type.value}] {event.message} | {event.payload}")
        elif event.type == EventType.CHECK_RUNNING:
            logger.debug(f"[{event.type.value}] {event.message} | {event.payload}")
        else:
            logger.info(f"[{event.type.value}] {event.message} | {event.payload}")

