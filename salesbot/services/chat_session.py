from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from salesbot.config import Settings
from salesbot.logging.flight_recorder import FlightRecorder
from salesbot.services.generation import GenerationPort, build_engine
from salesbot.services.orchestrator import ChatOrchestrator, TurnResult

logger = logging.getLogger(__name__)

GREETING = (
    "Hi! What kind of outboard motor are you looking for? "
    "(boat type, horsepower range, and use: river/coast/offshore/work)"
)
EMPTY_FIELD = "—"

STATUS_LOADING = "Loading model (this may take a while)..."
STATUS_READY = "Ready"
STATUS_GENERATING = "Generating…"
STATUS_DONE = "Done (info pack ready)"
STATUS_ERROR = "Error"


@dataclass(frozen=True)
class ChatMessage:
    sender: str
    text: str
    kind: str = "assistant"


class ChatSession:
    """Headless chat front-end: transcript, status line and busy guard.

    The session is the collaborator that keeps turns from overlapping; the
    orchestrator itself assumes a single caller.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine_factory: Callable[[Settings], GenerationPort] = build_engine,
        recorder: Optional[FlightRecorder] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.engine_factory = engine_factory
        self.recorder = recorder or FlightRecorder()
        self.orchestrator: Optional[ChatOrchestrator] = None
        self.messages: List[ChatMessage] = [ChatMessage(sender="Assistant", text=GREETING)]
        self.status = STATUS_LOADING
        self.busy = False

    async def load(self) -> bool:
        self.busy = True
        self.status = STATUS_LOADING
        try:
            engine = await asyncio.to_thread(self.engine_factory, self.settings)
        except Exception as exc:  # noqa: BLE001
            logger.exception("session.load_error %s", exc)
            self.recorder.log("SESSION", "load_error", error=str(exc))
            self.status = f"Error loading model: {exc}"
            return False
        else:
            self.orchestrator = ChatOrchestrator(engine, self.settings, recorder=self.recorder)
            self.status = STATUS_READY
            self.recorder.log("SESSION", "loaded", backend=self.settings.backend)
            return True
        finally:
            self.busy = False

    def can_send(self, text: str) -> bool:
        return not self.busy and self.orchestrator is not None and bool(text and text.strip())

    async def send(self, text: str) -> Optional[TurnResult]:
        if self.orchestrator is None:
            return None
        text = (text or "").strip()
        if not text:
            return None
        if self.busy:
            logger.warning("session.busy_rejected")
            return None

        self.messages.append(ChatMessage(sender="You", text=text, kind="user"))
        self.busy = True
        self.status = STATUS_GENERATING
        try:
            result = await self.orchestrator.handle_user_turn(text)
        except Exception as exc:  # noqa: BLE001
            logger.exception("session.turn_error %s", exc)
            self.messages.append(ChatMessage(sender="Assistant", text=f"Error: {exc}", kind="error"))
            self.status = STATUS_ERROR
            return None
        finally:
            self.busy = False

        self.messages.append(ChatMessage(sender="Assistant", text=result.reply))
        if result.changed:
            self.recorder.log("SESSION", "state_changed", items=len(self.orchestrator.snapshot().selected_items))
        self.status = STATUS_DONE if self.orchestrator.snapshot().is_complete else STATUS_READY
        return result

    @property
    def selected_items_text(self) -> str:
        if self.orchestrator is None:
            return EMPTY_FIELD
        items = self.orchestrator.snapshot().selected_items
        return ", ".join(items) if items else EMPTY_FIELD

    @property
    def contact_text(self) -> str:
        if self.orchestrator is None:
            return EMPTY_FIELD
        address = self.orchestrator.snapshot().contact_address
        return address if address and address.strip() else EMPTY_FIELD
