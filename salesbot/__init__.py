from __future__ import annotations

import os

from dotenv import load_dotenv

# Load from project root .env if present
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

from salesbot.services.orchestrator import ChatOrchestrator, TurnResult, handle_user_turn  # noqa: E402

__all__ = ["ChatOrchestrator", "TurnResult", "handle_user_turn"]
