"""Shared test fixtures for the czytam test suite.

WHY: Most test modules read the same few sentences and library words.
Centralizing them keeps the worked example ("KO·T PI·JE WO·DĘ") in one
place and makes every module test against identical data.

HOW: Plain module-level constants plus pytest fixtures that return fresh
copies, so a test mutating its list cannot leak into another test.

RULES:
- KOT_PIJE_WODE tokenizes to 8 tokens with words (0,1), (3,4), (6,7)
- Library words carry ids 1..4 so they can be dealt in Memory
- No fixture touches the network
"""

from typing import List

import pytest

from czytam.api.models import Sentence, Word

KOT_PIJE_WODE = "KO·T PI·JE WO·DĘ"
FOKA = "FO·KA"

LIBRARY_WORDS: List[Word] = [
    Word(text="piłka", syllables=["pił", "ka"], image_url="https://img.example/pilka.png", id=1),
    Word(text="kot", syllables=["kot"], image_url="https://img.example/kot.png", id=2),
    Word(text="mama", syllables=["ma", "ma"], image_url="", id=3),
    Word(text="rower", syllables=["ro", "wer"], image_url="https://img.example/rower.png", id=4),
]


@pytest.fixture
def library_words() -> List[Word]:
    """Four library words with ids and syllables."""
    return list(LIBRARY_WORDS)


@pytest.fixture
def booklet_sentences() -> List[Sentence]:
    """Three booklet pages: two pre-syllabified, one needing the syllabify call."""
    return [
        Sentence(text="Kot pije wodę.", syllables=KOT_PIJE_WODE, image_url="https://img.example/p1.png"),
        Sentence(text="Foka.", syllables=FOKA, image_url="https://img.example/p2.png"),
        Sentence(text="Ala ma kota.", syllables=None, image_url=None),
    ]
