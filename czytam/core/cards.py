"""Card variants and the memory-matching game.

WHY: The memory mode lays out pairs of cards face down; a card shows
either a picture, a word, or both. Rather than one loose record with a
type string and ad hoc optional fields, each kind of card is its own
class carrying exactly what it shows. The shuffle takes an injected
random source so games are reproducible in tests.

HOW: build_memory_deck() turns library words into pairs of cards for
the chosen variant, keeps at most MEMORY_MAX_PAIRS pairs, and shuffles
with the given random.Random. MemoryGame holds the face-up/matched
state and implements the flip → compare → resolve cycle.

RULES:
- word-word variant: two identical WordCards per word
- image-word variant: one ImageCard and one WordCard per word
- image-image variant: two FullCards (picture with caption) per word
- Words without an id are skipped (a pair needs a key)
- At most two unmatched cards are face up at once
- Two face-up cards with the same word_id become matched; otherwise they
  stay face up until resolve() turns them back
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from czytam.api.models import Word
from czytam.config import MEMORY_MAX_PAIRS

logger = logging.getLogger(__name__)


class MemoryVariant(str, enum.Enum):
    WORD_WORD = "word-word"
    IMAGE_WORD = "image-word"
    IMAGE_IMAGE = "image-image"


@dataclass(frozen=True)
class ImageCard:
    """Card face showing only the word's picture."""

    card_id: str
    word_id: int
    image_url: str


@dataclass(frozen=True)
class WordCard:
    """Card face showing only the written word."""

    card_id: str
    word_id: int
    text: str


@dataclass(frozen=True)
class FullCard:
    """Card face showing the picture with the word under it."""

    card_id: str
    word_id: int
    text: str
    image_url: str


Card = Union[ImageCard, WordCard, FullCard]


def _pair_for(word: Word, variant: MemoryVariant) -> List[Card]:
    if variant is MemoryVariant.IMAGE_IMAGE:
        return [
            FullCard(card_id="{}-a".format(word.id), word_id=word.id, text=word.text, image_url=word.image_url),
            FullCard(card_id="{}-b".format(word.id), word_id=word.id, text=word.text, image_url=word.image_url),
        ]
    if variant is MemoryVariant.IMAGE_WORD:
        return [
            ImageCard(card_id="{}-image".format(word.id), word_id=word.id, image_url=word.image_url),
            WordCard(card_id="{}-word".format(word.id), word_id=word.id, text=word.text),
        ]
    return [
        WordCard(card_id="{}-a".format(word.id), word_id=word.id, text=word.text),
        WordCard(card_id="{}-b".format(word.id), word_id=word.id, text=word.text),
    ]


def build_memory_deck(
    words: Sequence[Word],
    variant: MemoryVariant = MemoryVariant.WORD_WORD,
    rng: Optional[random.Random] = None,
    max_pairs: int = MEMORY_MAX_PAIRS,
) -> List[Card]:
    """Build a shuffled memory deck from library words.

    Args:
        words: Words of the learning set, in set order.
        variant: Which pair layout to use.
        rng: Random source for the shuffle; pass a seeded
            random.Random for a reproducible deck.
        max_pairs: Upper bound on pairs dealt.

    Returns:
        Cards in shuffled order, two per dealt word.
    """
    rng = rng or random.Random()
    variant = MemoryVariant(variant)

    eligible = [w for w in words if w.id is not None]
    if len(eligible) < len(words):
        logger.debug("Skipping %d word(s) without id", len(words) - len(eligible))

    deck: List[Card] = []
    for word in eligible[:max_pairs]:
        deck.extend(_pair_for(word, variant))

    rng.shuffle(deck)
    return deck


class FlipResult(str, enum.Enum):
    REJECTED = "rejected"
    FLIPPED = "flipped"
    MATCHED = "matched"
    MISMATCHED = "mismatched"


@dataclass
class MemoryGame:
    """Face-up and matched state of one memory board.

    flip() is the card-click handler. After MISMATCHED the board holds
    two face-up cards and refuses further flips until resolve() turns
    them back (the UI calls it after a short pause).
    """

    cards: List[Card]
    face_up: List[int] = field(default_factory=list)
    matched: set = field(default_factory=set)

    def flip(self, index: int) -> FlipResult:
        if not 0 <= index < len(self.cards):
            raise IndexError("Card index {} out of range".format(index))
        if len(self.face_up) >= 2 or index in self.face_up or index in self.matched:
            return FlipResult.REJECTED

        self.face_up.append(index)
        if len(self.face_up) < 2:
            return FlipResult.FLIPPED

        first, second = (self.cards[i] for i in self.face_up)
        if first.word_id == second.word_id:
            self.matched.update(self.face_up)
            self.face_up = []
            return FlipResult.MATCHED
        return FlipResult.MISMATCHED

    def resolve(self) -> None:
        """Turn back a mismatched pair."""
        self.face_up = []

    def is_face_up(self, index: int) -> bool:
        return index in self.face_up or index in self.matched

    @property
    def is_finished(self) -> bool:
        return bool(self.cards) and len(self.matched) == len(self.cards)
