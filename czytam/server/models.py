"""Pydantic request/response models for the practice HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and the OpenAPI docs a front-end developer reads
when wiring a tablet app to the engine.

HOW: Requests carry the words or sentences a session runs over, so the
API works without the remote store. Responses flatten the session into
what a view draws: tokens with visibility, a label, the picture when it
may be shown, and per-mode extras.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- mode and action are plain strings validated by the app (400, not 422)
- Response models never expose cursor internals beyond what a view needs
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from czytam.api.models import Sentence, Word
from czytam.core.cards import MemoryVariant


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class WordIn(BaseModel):
    """A library word supplied with a session request."""

    text: str = Field(description="The word as written, e.g. 'piłka'.")
    syllables: List[str] = Field(
        default_factory=list,
        description="Syllables of the word, e.g. ['pił', 'ka'].",
    )
    image_url: str = Field(default="", description="Picture of the word, if any.")
    id: Optional[int] = Field(
        default=None,
        description="Library id. Required for the word to be dealt in Memory.",
    )

    def to_word(self) -> Word:
        return Word(
            text=self.text,
            syllables=list(self.syllables),
            image_url=self.image_url,
            id=self.id,
        )


class SentenceIn(BaseModel):
    """One booklet page supplied with a session request."""

    text: str = Field(description="Plain sentence text, e.g. 'Kot pije wodę.'")
    syllables: Optional[str] = Field(
        default=None,
        description=(
            "Syllable-annotated sentence, e.g. 'KO·T PI·JE WO·DĘ'. When "
            "omitted the server calls the syllabify function."
        ),
    )
    image_url: Optional[str] = Field(default=None, description="Picture for the page.")

    def to_sentence(self) -> Sentence:
        return Sentence(text=self.text, syllables=self.syllables, image_url=self.image_url)


class CreateSessionRequest(BaseModel):
    """Body of POST /sessions."""

    mode: str = Field(description="Learning mode label, see GET /modes.")
    words: List[WordIn] = Field(
        default_factory=list,
        description="Words for Pokaz kart, Sylaby w ruchu and Memory.",
    )
    sentences: List[SentenceIn] = Field(
        default_factory=list,
        description="Pages for the booklet modes.",
    )
    set_id: Optional[int] = Field(
        default=None,
        description="Learning set id, used to look up page pictures.",
    )
    variant: MemoryVariant = Field(
        default=MemoryVariant.WORD_WORD,
        description="Memory card layout.",
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the Memory shuffle; omit for a random deal.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "mode": "Książeczka 2.0 - Odkrywanie",
                "sentences": [
                    {"text": "Kot pije wodę.", "syllables": "KO·T PI·JE WO·DĘ"},
                    {"text": "Foka pływa."},
                ],
            }
        ]
    }}


class ActionRequest(BaseModel):
    """Body of POST /sessions/{id}/actions.

    RULES:
    - Give either action or key; key is translated with the mode's bindings
    - Reading modes: advance, retreat, next_page, previous_page (retry for booklets)
    - Sylaby w ruchu: toggle, next_word
    - Memory: flip (with index), resolve
    """

    action: Optional[str] = Field(default=None, description="Action name.")
    key: Optional[str] = Field(
        default=None,
        description="Keyboard key name as in KeyboardEvent.key, e.g. 'ArrowRight' or ' '.",
    )
    index: Optional[int] = Field(default=None, description="Card index for Memory flips.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TokenOut(BaseModel):
    index: int = Field(description="Position in the token sequence.")
    text: str = Field(description="Syllable text, or ' ' for a word boundary.")
    visibility: str = Field(description="dimmed, emphasized or space.")
    active: bool = Field(description="True for the syllable under the cursor.")


class CardOut(BaseModel):
    """One Memory card as the board shows it."""

    index: int = Field(description="Position on the board.")
    kind: str = Field(description="image, word or full.")
    face_up: bool = Field(description="Face up (flipped or matched).")
    matched: bool = Field(description="Already paired.")
    text: Optional[str] = Field(default=None, description="Word, only when face up.")
    image_url: Optional[str] = Field(default=None, description="Picture, only when face up.")


class SessionStateResponse(BaseModel):
    """Everything a view needs to draw a session.

    RULES:
    - tokens is empty for modes without a syllable cursor and while a
      booklet page is not ready
    - image_url is only set when the picture may be shown
    - status is 'ready' for modes that never load anything
    """

    id: str = Field(description="Session identifier (UUID).")
    mode: str = Field(description="Learning mode label.")
    status: str = Field(description="loading, ready, not_ready or failed.")
    label: Optional[str] = Field(default=None, description="Card or page indicator, e.g. '2 / 5'.")
    tokens: List[TokenOut] = Field(default_factory=list, description="Rendered syllable tokens.")
    sentence_completed: bool = Field(default=False, description="Whole sentence read.")
    image_revealed: bool = Field(default=False, description="Discovery picture revealed.")
    image_url: Optional[str] = Field(default=None, description="Picture to show now.")
    error: Optional[str] = Field(default=None, description="Syllabify failure message.")
    pieces: Optional[List[str]] = Field(
        default=None,
        description="Sylaby w ruchu: the word whole or split into syllables.",
    )
    cards: Optional[List[CardOut]] = Field(default=None, description="Memory board.")
    finished: Optional[bool] = Field(default=None, description="Memory: all pairs matched.")


class ActionResponse(BaseModel):
    result: str = Field(description="Outcome of the action, e.g. 'moved', 'image_revealed', 'matched'.")
    state: SessionStateResponse = Field(description="Session state after the action.")


class ModeInfo(BaseModel):
    value: str = Field(description="Mode label used in POST /sessions.")
    name: str = Field(description="Mode identifier.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
