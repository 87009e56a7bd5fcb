"""Syllables in motion: show a word whole, then pull it apart.

WHY: Before reading syllable by syllable, a child should see that a word
is built from syllables. This mode toggles each card between the whole
word and its separated syllables.

RULES:
- Words wrap around (modulo the word count)
- Moving to another word always starts joined
- A word without stored syllables splits into itself
"""

from __future__ import annotations

from typing import List, Sequence

from czytam.api.models import Word


class SyllablesInMotionSession:
    def __init__(self, words: Sequence[Word]) -> None:
        if not words:
            raise ValueError("Syllables in motion needs at least one word")
        self._words: List[Word] = list(words)
        self._index = 0
        self.is_split = False

    @property
    def index(self) -> int:
        return self._index

    @property
    def word(self) -> Word:
        return self._words[self._index]

    @property
    def pieces(self) -> List[str]:
        """What is on the card: [word] when joined, its syllables when split."""
        if not self.is_split:
            return [self.word.text]
        syllables = [s for s in self.word.syllables if s.strip()]
        return syllables or [self.word.text]

    def toggle(self) -> bool:
        self.is_split = not self.is_split
        return self.is_split

    def next_word(self) -> None:
        self.is_split = False
        self._index = (self._index + 1) % len(self._words)
