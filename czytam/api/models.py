"""Remote store records: words, sentences, and learning sets.

WHY: The remote store returns plain JSON rows for the word library and
for learning sets. Typed dataclasses make the few fields the trainer
reads explicit and catch field mismatches early.

HOW: Each dataclass maps to one row shape. from_dict() parses a raw row;
to_dict() produces the insert/update payload. Fields the trainer does
not read are ignored on parse.

RULES:
- ids are numeric and None for records not yet stored
- Word.syllables is a list of syllable strings (["pił", "ka"])
- Sentence.syllables is the middle-dot string ("KO·T PI·JE") or None
  when the sentence was never syllabified
- Sentence.image_url is None when no picture was generated
- SetType / LearningMode values are the labels stored by the app
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional


class SetType(str, enum.Enum):
    """Kind of learning set as stored in the ``type`` column."""

    PICTURE_CARDS = "Karty obrazkowe"
    BOOKLET = "Książeczka"
    ANALYSIS = "Karty do analizy"
    COMPARISON = "Karty porównawcze"


class LearningMode(str, enum.Enum):
    """Practice mode a session runs in."""

    CARD_SHOW = "Pokaz kart"
    BOOKLET = "Książeczka"
    BOOKLET_DISCOVERY = "Książeczka 2.0 - Odkrywanie"
    SYLLABLES_IN_MOTION = "Sylaby w ruchu"
    MEMORY = "Memory"


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass
class Word:
    """One entry of the shared word library."""

    text: str
    syllables: list[str] = field(default_factory=list)
    image_url: str = ""
    category: str = ""
    id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Word:
        return cls(
            id=_optional_int(data.get("id")),
            text=data["text"],
            syllables=list(data.get("syllables") or []),
            image_url=data.get("image_url") or "",
            category=data.get("category") or "",
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> dict:
        """Insert/update payload; server-assigned fields are left out."""
        return {
            "text": self.text,
            "syllables": list(self.syllables),
            "image_url": self.image_url,
            "category": self.category,
        }


@dataclass
class Sentence:
    """One booklet page: the sentence, its syllables, and its picture."""

    text: str
    syllables: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Sentence:
        return cls(
            text=data["text"],
            syllables=data.get("syllables") or None,
            image_url=data.get("image_url") or None,
        )

    def to_dict(self) -> dict:
        data: dict = {"text": self.text}
        if self.syllables:
            data["syllables"] = self.syllables
        if self.image_url:
            data["image_url"] = self.image_url
        return data


@dataclass
class LearningSet:
    """A named selection of words (and, for booklets, sentences).

    RULES:
    - word_ids reference Word.id values of the library
    - sentences is empty for every type except BOOKLET
    """

    name: str
    type: SetType
    word_ids: list[int] = field(default_factory=list)
    sentences: list[Sentence] = field(default_factory=list)
    id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> LearningSet:
        return cls(
            id=_optional_int(data.get("id")),
            name=data["name"],
            type=SetType(data["type"]),
            word_ids=[int(w) for w in data.get("wordIds") or []],
            sentences=[Sentence.from_dict(s) for s in data.get("sentences") or []],
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> dict:
        data: dict = {
            "name": self.name,
            "type": self.type.value,
            "wordIds": [str(w) for w in self.word_ids],
        }
        if self.type is SetType.BOOKLET:
            data["sentences"] = [s.to_dict() for s in self.sentences]
        return data


def build_image_lookup(sets: list[LearningSet]) -> dict[tuple[int, int], str]:
    """Map (set_id, page_index) → image URL for every illustrated sentence.

    Booklet sessions read this to decide whether there is a picture to
    reveal on a page. Sets without an id and sentences without a URL
    contribute nothing.
    """
    images: dict[tuple[int, int], str] = {}
    for learning_set in sets:
        if learning_set.id is None:
            continue
        for index, sentence in enumerate(learning_set.sentences):
            if sentence.image_url:
                images[(learning_set.id, index)] = sentence.image_url
    return images
