from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParsedTurnResponse(BaseModel):
    """Structured reply the backend is asked to emit on every turn.

    Only the aliases, the JSON keys named in the prompt schema, are read. Keys are
    matched case-insensitively and unknown keys are dropped. Strict mode
    rejects type mismatches such as ``"ask_email": "yes"`` or
    ``"done": null`` instead of coercing them.
    """

    model_config = ConfigDict(extra="ignore", strict=True, frozen=True)

    reply: Optional[str] = None
    selected_items: Optional[List[Optional[str]]] = Field(default=None, alias="selected_lines")
    request_contact: bool = Field(default=False, alias="ask_email")
    contact_address: Optional[str] = Field(default=None, alias="email")
    complete: bool = Field(default=False, alias="done")

    @model_validator(mode="before")
    @classmethod
    def _fold_key_case(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {key.lower() if isinstance(key, str) else key: value for key, value in data.items()}

