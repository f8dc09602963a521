from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from salesbot.config import SamplingSettings, Settings
from salesbot.logging.flight_recorder import FlightRecorder
from salesbot.models.state import ConversationState, StateSnapshot
from salesbot.services.generation import GenerationPort
from salesbot.services.json_extractor import extract_first_json_object
from salesbot.services.prompt_builder import CHAT_TEMPLATES, PromptBuilder
from salesbot.services.reconciler import reconcile
from salesbot.services.response_parser import parse_turn_response
from salesbot.services.sanitizer import ResponseSanitizer

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 500
NOT_JSON_PREFIX = "Model output was not JSON. First 500 chars:\n"
PARSE_FAILED_REPLY = "Sorry, my output wasn't valid JSON. Please try again."


class TurnStage(str, Enum):
    PROMPT_READY = "prompt_ready"
    GENERATING = "generating"
    SANITIZING = "sanitizing"
    EXTRACTING = "extracting"
    PARSING = "parsing"
    RECONCILING = "reconciling"
    TURN_COMPLETE = "turn_complete"


class TurnOutcome(str, Enum):
    OK = "ok"
    GENERATION_FAILED = "generation_failed"
    EXTRACTION_FAILED = "extraction_failed"
    PARSE_FAILED = "parse_failed"


@dataclass(frozen=True)
class TurnResult:
    reply: str
    changed: bool
    outcome: TurnOutcome = TurnOutcome.OK
    failed_at: Optional[TurnStage] = None


def preview_output(text: str, limit: int = PREVIEW_LIMIT) -> str:
    preview = text.strip()
    if len(preview) > limit:
        preview = preview[:limit] + "…"
    return preview


class ChatOrchestrator:
    """Runs one user turn through prompt, generation, extraction and merge.

    The orchestrator owns the ConversationState. Callers get StateSnapshot
    copies and must not start a second turn while one is in flight.
    """

    def __init__(
        self,
        engine: GenerationPort,
        settings: Optional[Settings] = None,
        recorder: Optional[FlightRecorder] = None,
    ) -> None:
        settings = settings or Settings()
        self.engine = engine
        self.prompt_builder = PromptBuilder(
            settings.catalog,
            template=CHAT_TEMPLATES[settings.chat_template],
            no_think_directive=settings.no_think_directive,
        )
        self.sanitizer = ResponseSanitizer(settings.reasoning_open, settings.reasoning_close)
        self.sampling: SamplingSettings = settings.sampling
        self.recorder = recorder or FlightRecorder()
        self._state = ConversationState()
        self.stage = TurnStage.PROMPT_READY

    def snapshot(self) -> StateSnapshot:
        return self._state.snapshot()

    async def handle_user_turn(self, user_text: str) -> TurnResult:
        try:
            return await self._run_turn(user_text)
        finally:
            self.stage = TurnStage.TURN_COMPLETE

    async def _run_turn(self, user_text: str) -> TurnResult:
        self.stage = TurnStage.PROMPT_READY
        with self.recorder.stage("PROMPT", user_text=user_text):
            prompt = self.prompt_builder.build(self._state, user_text)

        self.stage = TurnStage.GENERATING
        try:
            with self.recorder.stage("GENERATE", prompt_chars=len(prompt)):
                raw = await self.engine.generate(
                    prompt,
                    self.sampling.max_new_tokens,
                    self.sampling.temperature,
                    self.sampling.top_p,
                )
        except Exception as exc:  # noqa: BLE001
            logger.warning("turn.generation_error %s", exc, exc_info=True)
            self.recorder.log("GENERATE", "generation_error", error=str(exc))
            return TurnResult(f"Error: {exc}", False, TurnOutcome.GENERATION_FAILED, self.stage)

        self.stage = TurnStage.SANITIZING
        with self.recorder.stage("SANITIZE", raw_chars=len(raw or "")):
            text = self.sanitizer.sanitize(raw)

        self.stage = TurnStage.EXTRACTING
        with self.recorder.stage("EXTRACT"):
            candidate = extract_first_json_object(text)
        if candidate is None:
            preview = preview_output(text)
            logger.info("turn.extract_failed preview=%r", preview[:80])
            self.recorder.log("EXTRACT", "extraction_failed", chars=len(text))
            return TurnResult(NOT_JSON_PREFIX + preview, False, TurnOutcome.EXTRACTION_FAILED, self.stage)

        self.stage = TurnStage.PARSING
        with self.recorder.stage("PARSE", chars=len(candidate)):
            parsed = parse_turn_response(candidate)
        if parsed is None:
            self.recorder.log("PARSE", "parse_failed", chars=len(candidate))
            return TurnResult(PARSE_FAILED_REPLY, False, TurnOutcome.PARSE_FAILED, self.stage)

        self.stage = TurnStage.RECONCILING
        with self.recorder.stage("RECONCILE"):
            merged = reconcile(parsed, self._state)
        self._state = merged.state

        logger.info(
            "turn.complete changed=%s items=%d has_address=%s complete=%s",
            merged.changed,
            len(self._state.selected_items),
            self._state.contact_address is not None,
            self._state.is_complete,
        )
        return TurnResult(merged.reply, merged.changed)


async def handle_user_turn(session: ChatOrchestrator, user_text: str) -> Tuple[str, bool]:
    result = await session.handle_user_turn(user_text)
    return result.reply, result.changed
