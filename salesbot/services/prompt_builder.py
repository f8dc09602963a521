from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from salesbot.models.state import ConversationState

SALES_INSTRUCTIONS = """You are a helpful sales assistant for a company that sells outboard motors.

Output format rule (very important):
- Respond with ONE single JSON object and nothing else.
- No reasoning or thinking blocks, only the JSON object.
- No extra text before or after the JSON.
- Start with '{' and end with '}'.

JSON schema:
{
  "reply": string,
  "selected_lines": string[],
  "ask_email": boolean,
  "email": string|null,
  "done": boolean
}

Rules:
- Keep questions short.
- Only select lines that match user needs.
- If not enough info, ask 1-2 questions.
- When ready to send info packs, ask for email if missing.
- Validate email format loosely; if missing/invalid, ask again.
- If CURRENT STATE already contains selected_lines, do not ask which lines the user is interested in; continue with those lines.

If you are unsure, still output valid JSON using best effort."""

NONE_TOKEN = "none"


@dataclass(frozen=True)
class ChatTemplate:
    """Turn delimiters of a backend's chat format."""

    name: str
    system_open: str
    user_open: str
    assistant_open: str
    turn_close: str


CHAT_TEMPLATES: Dict[str, ChatTemplate] = {
    "chatml": ChatTemplate(
        name="chatml",
        system_open="<|im_start|>system\n",
        user_open="<|im_start|>user\n",
        assistant_open="<|im_start|>assistant\n",
        turn_close="<|im_end|>\n",
    ),
    "llama3": ChatTemplate(
        name="llama3",
        system_open="<|begin_of_text|><|start_header_id|>system<|end_header_id|>\n\n",
        user_open="<|start_header_id|>user<|end_header_id|>\n\n",
        assistant_open="<|start_header_id|>assistant<|end_header_id|>\n\n",
        turn_close="<|eot_id|>",
    ),
    "phi3": ChatTemplate(
        name="phi3",
        system_open="<|system|>\n",
        user_open="<|user|>\n",
        assistant_open="<|assistant|>\n",
        turn_close="<|end|>\n",
    ),
}


class PromptBuilder:
    """Renders instructions, catalog and current state into one templated prompt.

    The backend keeps nothing between calls, so every prompt restates the
    accumulated state and marks it authoritative.
    """

    def __init__(
        self,
        catalog: Sequence[str],
        template: ChatTemplate = CHAT_TEMPLATES["chatml"],
        instructions: str = SALES_INSTRUCTIONS,
        no_think_directive: Optional[str] = "/no_think",
    ) -> None:
        self.catalog: Tuple[str, ...] = tuple(catalog)
        self.template = template
        self.instructions = instructions
        self.no_think_directive = no_think_directive

    def build(self, state: ConversationState, user_text: str) -> str:
        t = self.template
        user_block = f"{self.no_think_directive}\n{user_text}" if self.no_think_directive else user_text
        return (
            f"{t.system_open}{self.instructions}\n\n{self.render_context(state)}\n{t.turn_close}"
            f"{t.user_open}{user_block}\n{t.turn_close}"
            f"{t.assistant_open}"
        )

    def render_context(self, state: ConversationState) -> str:
        selected = ", ".join(state.selected_items) if state.selected_items else NONE_TOKEN
        address = state.contact_address if state.contact_address and state.contact_address.strip() else NONE_TOKEN
        catalog_lines = "\n".join(f"{index}) {item}" for index, item in enumerate(self.catalog, start=1))
        return (
            "PRODUCT LINES (exact strings):\n"
            f"{catalog_lines}\n\n"
            "CURRENT STATE (authoritative; do not ask to confirm):\n"
            f"- selected_lines: {selected}\n"
            f"- email: {address}\n\n"
            "User may write Dutch or English.\n"
            "You are deciding which info pack(s) to send for one or more lines."
        )
