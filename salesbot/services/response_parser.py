from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from salesbot.models.turn_response import ParsedTurnResponse

logger = logging.getLogger(__name__)


def parse_turn_response(candidate: str) -> Optional[ParsedTurnResponse]:
    """Decode an extracted JSON object into a ParsedTurnResponse.

    Returns None for malformed JSON, a non-object payload or any field of the
    wrong type. No partially populated result is ever returned.
    """
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.info("parser.invalid_json err=%s", exc)
        return None

    if not isinstance(data, dict):
        logger.info("parser.not_an_object type=%s", type(data).__name__)
        return None

    try:
        return ParsedTurnResponse.model_validate(data)
    except ValidationError as exc:
        logger.info("parser.schema_mismatch errors=%s", exc.error_count())
        return None
