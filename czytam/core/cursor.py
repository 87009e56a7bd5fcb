"""Reveal cursor: the read-progress state machine for one sentence.

WHY: A child reads a sentence one syllable per tap. The view has to
know, after every tap, which syllables are already read, which one is
being read now, and whether the sentence (and its reward picture) is
done. Three learning modes share this logic and differ only in how the
end of a sentence is surfaced, so one configurable state machine serves
all of them.

HOW: State is (position, sentence_completed, image_revealed) over a
TokenizedSentence of N tokens. position is -1 before reading starts,
0..N-1 while reading (it may rest on a boundary, meaning "word just
finished"), and N once the sentence is completed. advance()/retreat()
return a Step telling the caller what happened, including the
overflow/underflow signals a session turns into page changes.

RULES:
- position never leaves [-1, N]
- CONTINUOUS: advancing a completed sentence restarts it at -1
- GATED: completion is a two-step gate. The first overflow completes the
  sentence, the next advance reveals the image, the one after that
  signals NEXT_PAGE
- retreat() exactly undoes advance() (except across the CONTINUOUS restart)
- retreat() at -1 signals PREVIOUS_PAGE and changes nothing
- With N == 0 every transition is IGNORED
- A cursor belongs to exactly one sentence: there is no reset or reload;
  callers build a new cursor for every new sentence
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional

from czytam.core.tokens import Boundary, TokenizedSentence


class RevealPolicy(str, enum.Enum):
    """How completion of a sentence is surfaced.

    RULES:
    - continuous: card show / linear booklet, image (if any) always shown
    - gated: booklet discovery, image hidden until acknowledged
    """

    CONTINUOUS = "continuous"
    GATED = "gated"


class Visibility(str, enum.Enum):
    """Render state of one token."""

    DIMMED = "dimmed"
    EMPHASIZED = "emphasized"
    SPACE = "space"


class Step(str, enum.Enum):
    """Outcome of one advance()/retreat() call.

    RULES:
    - ignored: nothing to read (N == 0), state unchanged
    - moved: position or a flag changed inside the sentence
    - completed: the cursor just moved past the final token
    - restarted: CONTINUOUS only, completed sentence reset to -1
    - image_revealed: GATED only, second acknowledgement of completion
    - next_page / previous_page: overflow / underflow; the cursor did not
      change and the caller decides what the neighbouring page is
    """

    IGNORED = "ignored"
    MOVED = "moved"
    COMPLETED = "completed"
    RESTARTED = "restarted"
    IMAGE_REVEALED = "image_revealed"
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"


@dataclass(frozen=True)
class CursorState:
    """Immutable snapshot of a cursor, for rendering and tests."""

    position: int
    sentence_completed: bool
    image_revealed: bool


class RevealCursor:
    """Cursor over one tokenized sentence.

    WHY: Every reading mode needs the same highlight rules, and separate copies
    of this logic drift apart. One class with a policy switch keeps
    the highlight rules identical everywhere.

    HOW: Holds the sentence and the three state fields. Transitions are
    synchronous and return a Step. visibility_of() derives render state
    from the current fields only, so there is nothing to keep in sync.

    RULES:
    - Construct a new cursor for every sentence; never share one
    - visibility_of(i) with i outside [0, N) is a programming error
    """

    def __init__(
        self,
        sentence: TokenizedSentence,
        policy: RevealPolicy = RevealPolicy.CONTINUOUS,
    ) -> None:
        self._sentence = sentence
        self._policy = RevealPolicy(policy)
        self._position = -1
        self._sentence_completed = False
        self._image_revealed = False

    def __repr__(self) -> str:
        return "RevealCursor(policy={}, position={}, n={}, completed={}, revealed={})".format(
            self._policy.value,
            self._position,
            len(self._sentence),
            self._sentence_completed,
            self._image_revealed,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def sentence(self) -> TokenizedSentence:
        return self._sentence

    @property
    def policy(self) -> RevealPolicy:
        return self._policy

    @property
    def position(self) -> int:
        return self._position

    @property
    def sentence_completed(self) -> bool:
        return self._sentence_completed

    @property
    def image_revealed(self) -> bool:
        return self._image_revealed

    @property
    def state(self) -> CursorState:
        return CursorState(
            position=self._position,
            sentence_completed=self._sentence_completed,
            image_revealed=self._image_revealed,
        )

    @property
    def image_visible(self) -> bool:
        """Whether an associated image may be shown right now.

        CONTINUOUS never hides the image; GATED shows it only after the
        learner acknowledged the finished sentence.
        """
        if self._policy is RevealPolicy.GATED:
            return self._image_revealed
        return True

    @property
    def active_index(self) -> Optional[int]:
        """Index of the syllable being read (underlined), or None.

        None before reading starts, while resting on a boundary, and
        once the sentence is completed.
        """
        n = len(self._sentence)
        if self._sentence_completed or not 0 <= self._position < n:
            return None
        if self._sentence.is_boundary(self._position):
            return None
        return self._position

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def advance(self) -> Step:
        """Move forward one slot, or surface completion per the policy."""
        n = len(self._sentence)
        if n == 0:
            return Step.IGNORED

        if self._policy is RevealPolicy.GATED:
            if self._image_revealed:
                return Step.NEXT_PAGE
            if self._sentence_completed:
                self._image_revealed = True
                return Step.IMAGE_REVEALED
        elif self._position >= n:
            self._position = -1
            self._sentence_completed = False
            return Step.RESTARTED

        position = self._position
        next_index = position + 1

        if next_index < n and self._sentence.is_boundary(next_index):
            # Rest on the boundary: "word just finished"
            position = next_index
        elif position >= 0 and self._sentence.is_boundary(position):
            while next_index < n and self._sentence.is_boundary(next_index):
                next_index += 1
            position = next_index
        else:
            position = next_index

        if position >= n:
            self._position = n
            self._sentence_completed = True
            return Step.COMPLETED

        self._position = position
        return Step.MOVED

    def retreat(self) -> Step:
        """Move back one slot, undoing the matching advance()."""
        n = len(self._sentence)
        if n == 0:
            return Step.IGNORED

        if self._image_revealed:
            self._image_revealed = False
            return Step.MOVED

        if self._sentence_completed:
            self._sentence_completed = False
            self._position = n - 1
            return Step.MOVED

        if self._position <= -1:
            return Step.PREVIOUS_PAGE

        position = self._position
        prev_index = position - 1

        if prev_index >= 0 and self._sentence.is_boundary(prev_index):
            position = prev_index
        elif self._sentence.is_boundary(position):
            while prev_index >= 0 and self._sentence.is_boundary(prev_index):
                prev_index -= 1
            position = prev_index
        else:
            position = prev_index

        self._position = max(position, -1)
        return Step.MOVED

    # ------------------------------------------------------------------
    # Rendering queries
    # ------------------------------------------------------------------

    def visibility_of(self, index: int) -> Visibility:
        """Render state of token ``index``.

        RULES:
        - Boundary → SPACE (plain whitespace, never highlighted)
        - Nothing read yet → DIMMED
        - Sentence completed → EMPHASIZED for every syllable
        - Otherwise EMPHASIZED if the token's whole word ends at or before
          the cursor, or the token is the one under the cursor
        """
        n = len(self._sentence)
        if not 0 <= index < n:
            raise IndexError(
                "Token index {} out of range for sentence of {} tokens".format(index, n)
            )

        token = self._sentence.tokens[index]
        if isinstance(token, Boundary):
            return Visibility.SPACE

        if self._position == -1:
            return Visibility.DIMMED

        if self._sentence_completed or self._position >= n:
            return Visibility.EMPHASIZED

        span = self._sentence.words[token.word_index]
        if span.end_index <= self._position or index == self._position:
            return Visibility.EMPHASIZED

        return Visibility.DIMMED

    def visibilities(self) -> List[Visibility]:
        """visibility_of() for every token, in order."""
        return [self.visibility_of(i) for i in range(len(self._sentence))]
