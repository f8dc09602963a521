from __future__ import annotations

from typing import Any, Dict, List, Union

import pytest


class ScriptedEngine:
    """Generation backend that replays canned outputs in order."""

    def __init__(self, *outputs: Union[str, None, Exception]) -> None:
        self.outputs = list(outputs)
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, prompt: str, max_new_tokens: int, temperature: float, top_p: float) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "max_new_tokens": max_new_tokens,
                "temperature": temperature,
                "top_p": top_p,
            }
        )
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


@pytest.fixture
def scripted_engine():
    return ScriptedEngine


KAYAK_JSON = (
    '{"reply":"Got it — the RiverLite should work. What\'s your email?",'
    '"selected_lines":["RiverLite 2–6hp (portable)"],'
    '"ask_email":true,"email":null,"done":false}'
)

EMAIL_JSON = (
    '{"reply":"Thanks! The info pack is on its way.",'
    '"selected_lines":["RiverLite 2–6hp (portable)"],'
    '"ask_email":false,"email":"jane@example.com","done":true}'
)


@pytest.fixture
def kayak_json() -> str:
    return KAYAK_JSON


@pytest.fixture
def email_json() -> str:
    return EMAIL_JSON
