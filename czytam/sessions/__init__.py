"""Learning-mode sessions built on the reveal engine.

WHY: The card show and both booklets read syllables through the same
cursor; what differs is the glue around it (what a finished sentence
leads to, where the picture comes from, which keys turn pages). Each
mode gets a small session class holding that glue.

HOW: input.py maps keys to actions, view.py snapshots tokens for
rendering, and card_show.py, booklet.py and motion.py hold one session
class per mode. The memory game lives in core.cards.

RULES:
- Sessions never reuse a cursor across words or pages
- Session classes perform no rendering
"""

from czytam.sessions.booklet import BookletSession, SentenceStatus
from czytam.sessions.card_show import CardShowSession
from czytam.sessions.input import KEY_BINDINGS, InputAction, action_for_key
from czytam.sessions.motion import SyllablesInMotionSession
from czytam.sessions.view import TokenView, render_tokens

__all__ = [
    "BookletSession",
    "CardShowSession",
    "InputAction",
    "KEY_BINDINGS",
    "SentenceStatus",
    "SyllablesInMotionSession",
    "TokenView",
    "action_for_key",
    "render_tokens",
]
