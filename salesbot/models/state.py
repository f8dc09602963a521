from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class ConversationState:
    """Facts accumulated across the turns of one sales conversation.

    Only the reconciler writes to this record. Everything outside the
    orchestrator sees a StateSnapshot instead.
    """

    selected_items: List[str] = field(default_factory=list)
    contact_address: Optional[str] = None

    def __post_init__(self) -> None:
        if len(set(self.selected_items)) != len(self.selected_items):
            raise ValueError(f"selected_items contains duplicates: {self.selected_items}")

    @property
    def is_complete(self) -> bool:
        return bool(self.selected_items) and bool(self.contact_address and self.contact_address.strip())

    def copy(self) -> "ConversationState":
        return ConversationState(selected_items=list(self.selected_items), contact_address=self.contact_address)

    def snapshot(self) -> "StateSnapshot":
        return StateSnapshot(selected_items=tuple(self.selected_items), contact_address=self.contact_address)


@dataclass(frozen=True)
class StateSnapshot:
    """Read-only view of ConversationState handed to observers."""

    selected_items: Tuple[str, ...] = ()
    contact_address: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.selected_items) and bool(self.contact_address and self.contact_address.strip())
