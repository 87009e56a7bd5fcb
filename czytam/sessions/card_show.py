"""Card show: one library word per card, read syllable by syllable.

WHY: The simplest reading mode. A big card with one word, the child
taps through its syllables, and the next tap after the word is done
moves on to the next card.

HOW: Each card's syllable list is joined into middle-dot notation and
tokenized like any sentence, then read with a CONTINUOUS cursor. The
session adds the card-mode glue around the cursor: a completed word
advances to the next card instead of restarting, and underflow at the
start of a word goes back to the previous card.

RULES:
- Cards wrap around in both directions (modulo the word count)
- Every card change builds a fresh cursor
- A word without stored syllables is read as a single syllable
- Words with nothing to read (blank text and syllables) are skipped, so
  every card has at least one syllable to tap
- Retreat from a completed word returns to its last syllable
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from czytam.api.models import Word
from czytam.core.cursor import RevealCursor, RevealPolicy, Step
from czytam.core.tokenizer import syllables_to_sentence, tokenize
from czytam.core.tokens import TokenizedSentence
from czytam.sessions.input import InputAction
from czytam.sessions.view import TokenView, render_tokens

logger = logging.getLogger(__name__)


def _tokenize_word(word: Word) -> TokenizedSentence:
    return tokenize(syllables_to_sentence(word.syllables or [word.text]))


class CardShowSession:
    """Card-mode session over a list of words with at least one readable word."""

    def __init__(self, words: Sequence[Word]) -> None:
        readable = [w for w in words if not _tokenize_word(w).is_empty]
        if len(readable) < len(words):
            logger.info("Card show: skipping %d word(s) with nothing to read", len(words) - len(readable))
        if not readable:
            raise ValueError("Card show needs at least one word with something to read")
        self._words: List[Word] = readable
        self._index = 0
        self._cursor = self._build_cursor()

    def _build_cursor(self) -> RevealCursor:
        return RevealCursor(_tokenize_word(self._words[self._index]), RevealPolicy.CONTINUOUS)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def index(self) -> int:
        return self._index

    @property
    def card_count(self) -> int:
        return len(self._words)

    @property
    def word(self) -> Word:
        return self._words[self._index]

    @property
    def cursor(self) -> RevealCursor:
        return self._cursor

    @property
    def card_label(self) -> str:
        return "{} / {}".format(self._index + 1, len(self._words))

    def tokens(self) -> List[TokenView]:
        return render_tokens(self._cursor)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_to(self, index: int) -> None:
        self._index = index % len(self._words)
        self._cursor = self._build_cursor()
        logger.debug("Card %s: %s", self.card_label, self.word.text)

    def next_card(self) -> None:
        self.go_to(self._index + 1)

    def previous_card(self) -> None:
        self.go_to(self._index - 1)

    def advance(self) -> Step:
        if self._cursor.sentence_completed:
            self.next_card()
            return Step.NEXT_PAGE
        return self._cursor.advance()

    def retreat(self) -> Step:
        step = self._cursor.retreat()
        if step is Step.PREVIOUS_PAGE:
            self.previous_card()
        return step

    def handle(self, action: InputAction) -> Step:
        """Dispatch one input action."""
        action = InputAction(action)
        if action is InputAction.ADVANCE:
            return self.advance()
        if action is InputAction.RETREAT:
            return self.retreat()
        if action is InputAction.NEXT_PAGE:
            self.next_card()
            return Step.NEXT_PAGE
        self.previous_card()
        return Step.PREVIOUS_PAGE
