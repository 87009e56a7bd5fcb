"""User input actions and per-mode key bindings.

WHY: Every mode reacts to the same gestures (tap the sentence, press
the back arrow, use the keyboard), but the discovery booklet turns the
arrow keys into page turns while the other modes use them to step
through syllables. Keeping the mapping as data makes the difference
visible in one place.

RULES:
- Pointer tap on the sentence → ADVANCE, back-arrow control → RETREAT
  in every mode
- Card show and linear booklet: ArrowRight / Space → ADVANCE,
  ArrowLeft → RETREAT
- Booklet discovery: Space → ADVANCE, ArrowRight → NEXT_PAGE,
  ArrowLeft → PREVIOUS_PAGE
- Unbound keys map to None
"""

from __future__ import annotations

import enum
from typing import Dict, Optional

from czytam.api.models import LearningMode


class InputAction(str, enum.Enum):
    ADVANCE = "advance"
    RETREAT = "retreat"
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"


_STEP_KEYS: Dict[str, InputAction] = {
    "ArrowRight": InputAction.ADVANCE,
    " ": InputAction.ADVANCE,
    "ArrowLeft": InputAction.RETREAT,
}

_PAGE_KEYS: Dict[str, InputAction] = {
    " ": InputAction.ADVANCE,
    "ArrowRight": InputAction.NEXT_PAGE,
    "ArrowLeft": InputAction.PREVIOUS_PAGE,
}

KEY_BINDINGS: Dict[LearningMode, Dict[str, InputAction]] = {
    LearningMode.CARD_SHOW: _STEP_KEYS,
    LearningMode.BOOKLET: _STEP_KEYS,
    LearningMode.BOOKLET_DISCOVERY: _PAGE_KEYS,
}


def action_for_key(mode: LearningMode, key: str) -> Optional[InputAction]:
    """Translate a keyboard key (DOM ``KeyboardEvent.key`` name) for ``mode``."""
    return KEY_BINDINGS.get(LearningMode(mode), {}).get(key)
