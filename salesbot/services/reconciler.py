from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from salesbot.models.state import ConversationState
from salesbot.models.turn_response import ParsedTurnResponse

logger = logging.getLogger(__name__)

DEFAULT_REPLY = "Ok."

_ADDRESS_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class Reconciliation:
    state: ConversationState
    changed: bool
    reply: str


def looks_like_email(candidate: str) -> bool:
    """Loose ``local@domain.tld`` check; not an RFC 5322 validator."""
    return bool(_ADDRESS_RE.match(candidate))


def reconcile(parsed: ParsedTurnResponse, state: ConversationState) -> Reconciliation:
    """Merge one parsed response into a copy of ``state``.

    Items are appended in order and never removed. The address is replaced
    only by a different value that passes looks_like_email; anything else is
    dropped without failing the turn.
    """
    merged = state.copy()
    changed = False

    for item in parsed.selected_items or []:
        if not item or not item.strip():
            continue
        if item in merged.selected_items:
            continue
        merged.selected_items.append(item)
        changed = True

    if parsed.contact_address and parsed.contact_address.strip():
        address = parsed.contact_address.strip()
        if not looks_like_email(address):
            logger.info("reconcile.address_rejected")
        elif merged.contact_address != address:
            merged.contact_address = address
            changed = True

    reply = parsed.reply if parsed.reply is not None else DEFAULT_REPLY
    return Reconciliation(state=merged, changed=changed, reply=reply)
