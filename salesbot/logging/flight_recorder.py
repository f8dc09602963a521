from __future__ import annotations

import logging
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterator, List

logger = logging.getLogger(__name__)

STAGES = frozenset({"PROMPT", "GENERATE", "SANITIZE", "EXTRACT", "PARSE", "RECONCILE", "SESSION"})
REDACTED_KEYS = frozenset({"email", "contact_address", "user_text"})
MAX_EVENTS = 500


@dataclass
class StageEvent:
    stage: str
    message: str
    elapsed_ms: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class FlightRecorder:
    """Timings and notable events of the turn pipeline.

    Only the most recent ``max_events`` events are kept, so a long-lived chat
    session does not accumulate them without bound.
    """

    def __init__(self, max_events: int = MAX_EVENTS) -> None:
        self.events: Deque[StageEvent] = deque(maxlen=max_events)
        self.start_time = time.perf_counter()

    @contextmanager
    def stage(self, stage: str, **metadata: Any) -> Iterator[None]:
        stage_start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - stage_start) * 1000
            self._record(logging.DEBUG, stage, f"{stage} completed", elapsed_ms, metadata)

    def log(self, stage: str, message: str, **metadata: Any) -> None:
        self._record(logging.INFO, stage, message, 0.0, metadata)

    def messages(self, stage: str) -> List[str]:
        return [event.message for event in self.events if event.stage == stage]

    def _record(self, level: int, stage: str, message: str, elapsed_ms: float, metadata: Dict[str, Any]) -> None:
        if stage not in STAGES:
            logger.warning("flight_recorder.unknown_stage stage=%s", stage)
        total_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        redacted = _redact(metadata)
        self.events.append(StageEvent(stage, message, elapsed_ms, {"total_ms": total_ms, **redacted}))
        logger.log(
            level,
            "flight_recorder.event stage=%s message=%s elapsed_ms=%.2f total_ms=%.2f metadata=%s",
            stage,
            message,
            elapsed_ms,
            total_ms,
            redacted,
        )


def _redact(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: "***" if key in REDACTED_KEYS and value else value for key, value in payload.items()}
