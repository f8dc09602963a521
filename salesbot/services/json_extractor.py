from __future__ import annotations

from typing import Optional


def extract_first_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` substring of ``text``, or None.

    Only brace depth is tracked. Braces inside JSON string values are counted
    too, so a value such as ``"a } b"`` closes the object early. Callers rely
    on this boundary rule staying as it is.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None
