"""Syllable tokenizer: syllable-annotated sentence → flat token sequence.

WHY: Sentences arrive as strings in middle-dot notation, e.g.
"KO·T PI·JE WO·DĘ", either from the remote store or straight from the
AI syllabify function. The reveal cursor needs a flat sequence of
syllables with word gaps as their own slots, plus each word's span.

HOW: Split on the single-space word separator, then split each raw word
on the middle dot and drop empty pieces. Each surviving word appends
its syllables and records a WordSpan; one Boundary goes between
consecutive surviving words.

RULES:
- Words are separated by a single ASCII space, syllables by "·"
- A word without a middle dot is one syllable
- Empty pieces from doubled, leading, or trailing dots are dropped
  silently (AI output is not trusted to be clean)
- A raw word with zero syllables is skipped entirely: no WordSpan and
  no orphan boundary on either side
- Never raises; no syllables at all → empty TokenizedSentence
"""

from __future__ import annotations

from typing import Iterable, List

from czytam.config import SYLLABLE_SEPARATOR, WORD_SEPARATOR
from czytam.core.tokens import (
    Boundary,
    Syllable,
    SyllableToken,
    TokenizedSentence,
    WordSpan,
)


def _split_syllables(raw_word: str) -> List[str]:
    """Split one raw word on the middle dot, dropping empty pieces."""
    return [
        piece for piece in raw_word.split(SYLLABLE_SEPARATOR)
        if piece.strip()
    ]


def tokenize(sentence: str) -> TokenizedSentence:
    """Tokenize a syllable-annotated sentence.

    WHY: This is the single entry point every mode uses, so card mode,
    the linear booklet, and the discovery booklet all see identical
    token layouts for identical input.

    HOW: Walks raw words in order. The boundary for a word is emitted
    lazily, just before that word's first syllable, and only if some
    earlier word already produced syllables, so skipped words can
    never leave a leading, trailing, or doubled boundary behind.

    RULES:
    - word_index counts surviving words only (0, 1, 2, ...)
    - WordSpan ranges are inclusive and never include the boundary

    Args:
        sentence: Text such as "KO·T PI·JE WO·DĘ". Case is irrelevant.

    Returns:
        TokenizedSentence with tokens and word spans; empty when the
        sentence has no extractable syllables.

    Example:
        >>> tokenize("KO·T PI·JE").words
        (WordSpan(start_index=0, end_index=1), WordSpan(start_index=3, end_index=4))
    """
    tokens: list[SyllableToken] = []
    words: list[WordSpan] = []

    for raw_word in sentence.split(WORD_SEPARATOR):
        syllables = _split_syllables(raw_word)
        if not syllables:
            continue

        if words:
            tokens.append(Boundary())

        word_index = len(words)
        start_index = len(tokens)
        tokens.extend(Syllable(text=s, word_index=word_index) for s in syllables)
        words.append(WordSpan(start_index=start_index, end_index=len(tokens) - 1))

    return TokenizedSentence(tokens=tuple(tokens), words=tuple(words))


def syllables_to_sentence(syllables: Iterable[str]) -> str:
    """Join a stored word's syllable list into middle-dot notation.

    Library words keep their syllables as a list (["pił", "ka"]); card
    mode feeds them through tokenize() like any sentence. Blank entries
    are dropped the same way the tokenizer drops empty pieces.
    """
    return SYLLABLE_SEPARATOR.join(s.strip() for s in syllables if s.strip())
