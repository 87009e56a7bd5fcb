"""Core engine: token model, tokenizer, reveal cursor, and card variants.

WHY: The core package contains the stable heart of the trainer: the
token dataclasses, the syllable tokenizer, and the reveal cursor. They
are consumed by every learning mode and must stay mode-agnostic.

HOW: tokens.py defines the data structures, tokenizer.py builds them
from middle-dot sentences, cursor.py walks them, cards.py holds the
memory-game card variants.

RULES:
- Token dataclasses are the contract between tokenizer and cursor
- No mode-specific logic here; modes pick a RevealPolicy
- Nothing in core performs I/O
"""

from czytam.core.cursor import CursorState, RevealCursor, RevealPolicy, Step, Visibility
from czytam.core.tokenizer import syllables_to_sentence, tokenize
from czytam.core.tokens import Boundary, Syllable, TokenizedSentence, WordSpan

__all__ = [
    "Boundary",
    "CursorState",
    "RevealCursor",
    "RevealPolicy",
    "Step",
    "Syllable",
    "TokenizedSentence",
    "Visibility",
    "WordSpan",
    "syllables_to_sentence",
    "tokenize",
]
