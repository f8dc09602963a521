from __future__ import annotations

import re
from typing import Optional


class ResponseSanitizer:
    """Strips reasoning blocks (``<think>...</think>`` by default) from raw output."""

    def __init__(self, open_tag: str = "<think>", close_tag: str = "</think>") -> None:
        self.open_tag = open_tag
        self.close_tag = close_tag
        self._pattern = re.compile(f"{re.escape(open_tag)}.*?{re.escape(close_tag)}", re.DOTALL)

    def sanitize(self, raw: Optional[str]) -> str:
        if not raw:
            return ""
        # unmatched tags survive untouched
        return self._pattern.sub("", raw)
