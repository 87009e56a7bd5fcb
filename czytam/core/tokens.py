"""Token dataclasses for tokenized, syllable-annotated sentences.

WHY: A sentence like "KO·T PI·JE" has no structure a cursor can walk.
The reveal cursor and every presentation mode need one flat, addressable
sequence in which each slot is either a syllable or a word gap, plus a
table saying which slots belong to which word.

HOW: Four dataclasses form the model:
  Syllable: one displayable syllable and the index of its word
  Boundary: a marker slot between two words (renders as a space)
  WordSpan: inclusive token range of one word's syllables
  TokenizedSentence: the flat token tuple plus the word table

RULES:
- Boundaries never appear first, last, or next to another boundary
- W words → W syllable groups separated by exactly W−1 boundaries
- WordSpans are disjoint, in word order, and exclude boundaries
- Every Syllable is covered by exactly one WordSpan
- All dataclasses are frozen; a TokenizedSentence is never edited in place
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Syllable:
    """A single orthographic syllable belonging to word ``word_index``."""

    text: str
    word_index: int


@dataclass(frozen=True)
class Boundary:
    """A word gap occupying one cursor slot.

    Rendered as plain whitespace and never individually highlighted.
    """


SyllableToken = Union[Syllable, Boundary]


@dataclass(frozen=True)
class WordSpan:
    """Inclusive token-index range occupied by one word's syllables."""

    start_index: int
    end_index: int

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start_index <= index <= self.end_index

    @property
    def length(self) -> int:
        return self.end_index - self.start_index + 1


@dataclass(frozen=True)
class TokenizedSentence:
    """The tokenizer's output: flat tokens plus the per-word span table.

    WHY: The cursor needs random access to tokens (is this slot a
    boundary?) and to words (has this whole word been read?). Keeping
    both in one immutable object means a cursor can never pair tokens
    from one sentence with spans from another.

    RULES:
    - tokens: tuple of Syllable/Boundary in display order
    - words: tuple of WordSpan, one per non-empty word, in word order
    - An empty sentence (no syllables) has empty tokens and words
    """

    tokens: tuple[SyllableToken, ...] = ()
    words: tuple[WordSpan, ...] = field(default=())

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to read; callers treat this as not ready."""
        return not self.tokens

    def is_boundary(self, index: int) -> bool:
        return isinstance(self.tokens[index], Boundary)

    def word_of(self, index: int) -> WordSpan | None:
        """Return the span of the word owning token ``index`` (None for boundaries)."""
        token = self.tokens[index]
        if isinstance(token, Boundary):
            return None
        return self.words[token.word_index]

    def text_of(self, index: int) -> str:
        """Display text of token ``index``; a boundary displays as a single space."""
        token = self.tokens[index]
        if isinstance(token, Boundary):
            return " "
        return token.text

    @property
    def syllables(self) -> list[str]:
        """Syllable texts in order, boundaries dropped."""
        return [t.text for t in self.tokens if isinstance(t, Syllable)]
