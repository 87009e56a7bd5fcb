"""Booklet sessions: one sentence per page, linear or discovery.

WHY: A booklet is a short illustrated story. In the linear booklet the
picture is always on the page and the child reads the sentence under
it. In the discovery booklet the picture stays hidden until the
sentence has been read and acknowledged, as the reward for finishing.
Both read sentences through the same cursor; they differ only in the
RevealPolicy.

HOW: Each page change bumps a generation counter, drops the old cursor,
and resolves the page's syllable string: the stored ``syllables`` field
when present, otherwise the injected async syllabifier. When the string
arrives it is tokenized and a fresh cursor is built, but only if the
generation still matches, so a slow reply for a page the user already
left is thrown away instead of landing on the new page.

RULES:
- Pages wrap around in both directions (modulo the page count)
- Every page change (including wrap-around and retry) builds a fresh cursor
- While LOADING, NOT_READY, or FAILED there is no cursor and reading
  input is IGNORED; page-turn input still works
- A stale syllabify reply never touches the current page's state
- Syllabify failures set FAILED with the error message; retry() re-requests
- Resolved syllable strings are cached per page for the session's lifetime
- LINEAR booklet = CONTINUOUS policy, DISCOVERY booklet = GATED policy
"""

from __future__ import annotations

import enum
import logging
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from czytam.api.client import UpstreamServiceError
from czytam.api.models import LearningMode, Sentence
from czytam.core.cursor import RevealCursor, RevealPolicy, Step
from czytam.core.tokenizer import tokenize
from czytam.sessions.input import InputAction
from czytam.sessions.view import TokenView, render_tokens

logger = logging.getLogger(__name__)

Syllabifier = Callable[[str], Awaitable[str]]

_POLICY_BY_MODE: Dict[LearningMode, RevealPolicy] = {
    LearningMode.BOOKLET: RevealPolicy.CONTINUOUS,
    LearningMode.BOOKLET_DISCOVERY: RevealPolicy.GATED,
}


class SentenceStatus(str, enum.Enum):
    """Readiness of the current page's sentence.

    RULES:
    - loading: waiting for the syllabify function
    - ready: tokenized, cursor built, input accepted
    - not_ready: syllable string had nothing to read (placeholder shown)
    - failed: syllabify call failed; error holds the message
    """

    LOADING = "loading"
    READY = "ready"
    NOT_READY = "not_ready"
    FAILED = "failed"


class BookletSession:
    """Booklet or discovery-booklet session over a list of sentences.

    WHY: Owns the page index, the current page's cursor, and the async
    syllable resolution, so callers only forward input and re-render.

    HOW: Call ``await session.open()`` once, then ``await handle(action)``
    per user input. Reading state is queried through ``cursor``,
    ``tokens()``, ``status`` and ``image_visible``.

    RULES:
    - sentences must not be empty
    - syllabifier is only needed for pages without stored syllables
    - images maps (set_id, page_index) → URL; the sentence's own
      image_url is used when the map has no entry
    """

    def __init__(
        self,
        sentences: Sequence[Sentence],
        policy: RevealPolicy = RevealPolicy.CONTINUOUS,
        syllabifier: Optional[Syllabifier] = None,
        images: Optional[Mapping[Tuple[int, int], str]] = None,
        set_id: Optional[int] = None,
    ) -> None:
        if not sentences:
            raise ValueError("A booklet needs at least one sentence")
        self._sentences: List[Sentence] = list(sentences)
        self._policy = RevealPolicy(policy)
        self._syllabifier = syllabifier
        self._images: Mapping[Tuple[int, int], str] = images or {}
        self._set_id = set_id
        self._resolved: Dict[int, str] = {}

        self._page = 0
        self._generation = 0
        self._status = SentenceStatus.LOADING
        self._error: Optional[str] = None
        self._syllables: Optional[str] = None
        self._cursor: Optional[RevealCursor] = None

    @classmethod
    def for_mode(
        cls,
        mode: LearningMode,
        sentences: Sequence[Sentence],
        **kwargs,
    ) -> BookletSession:
        """Build a session with the policy that belongs to a booklet mode."""
        mode = LearningMode(mode)
        if mode not in _POLICY_BY_MODE:
            raise ValueError("Not a booklet mode: {}".format(mode.value))
        return cls(sentences, policy=_POLICY_BY_MODE[mode], **kwargs)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def policy(self) -> RevealPolicy:
        return self._policy

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_count(self) -> int:
        return len(self._sentences)

    @property
    def page_label(self) -> str:
        return "{} / {}".format(self._page + 1, len(self._sentences))

    @property
    def sentence(self) -> Sentence:
        return self._sentences[self._page]

    @property
    def status(self) -> SentenceStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def syllables(self) -> Optional[str]:
        """Syllable string the current cursor was built from."""
        return self._syllables

    @property
    def cursor(self) -> Optional[RevealCursor]:
        return self._cursor

    @property
    def image_url(self) -> Optional[str]:
        if self._set_id is not None:
            url = self._images.get((self._set_id, self._page))
            if url:
                return url
        return self.sentence.image_url

    @property
    def image_visible(self) -> bool:
        """Whether the page picture should be on screen now."""
        if not self.image_url:
            return False
        if self._cursor is None:
            return self._policy is RevealPolicy.CONTINUOUS
        return self._cursor.image_visible

    def tokens(self) -> List[TokenView]:
        return render_tokens(self._cursor)

    # ------------------------------------------------------------------
    # Page loading
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Load the first page."""
        await self.go_to_page(self._page)

    async def retry(self) -> None:
        """Re-request the current page (after FAILED)."""
        await self.go_to_page(self._page)

    async def next_page(self) -> None:
        await self.go_to_page(self._page + 1)

    async def previous_page(self) -> None:
        await self.go_to_page(self._page - 1)

    async def go_to_page(self, page: int) -> None:
        """Switch to ``page`` and resolve its syllables.

        The cursor of the previous page is dropped before anything is
        awaited, so input arriving while the new page loads is IGNORED
        rather than applied to the old sentence.
        """
        page = page % len(self._sentences)
        self._generation += 1
        generation = self._generation

        self._page = page
        self._cursor = None
        self._syllables = None
        self._error = None

        sentence = self._sentences[page]
        stored = sentence.syllables or self._resolved.get(page)
        if stored:
            self._apply(stored)
            return

        if self._syllabifier is None:
            self._status = SentenceStatus.FAILED
            self._error = "Sentence has no stored syllables and no syllabify function is configured"
            logger.warning("Page %d: %s", page, self._error)
            return

        self._status = SentenceStatus.LOADING
        logger.debug("Page %d: requesting syllables for %r", page, sentence.text)
        try:
            result = await self._syllabifier(sentence.text)
        except UpstreamServiceError as exc:
            if generation != self._generation:
                logger.debug("Page %d: ignoring failure of superseded request", page)
                return
            logger.warning("Page %d: syllabification failed: %s", page, exc)
            self._status = SentenceStatus.FAILED
            self._error = exc.message
            return

        self._resolved[page] = result
        if generation != self._generation:
            logger.debug("Page %d: discarding stale syllables %r", page, result)
            return
        self._apply(result)

    def _apply(self, syllables: str) -> None:
        self._syllables = syllables
        sentence = tokenize(syllables)
        if sentence.is_empty:
            self._status = SentenceStatus.NOT_READY
            logger.info("Page %d: nothing to read in %r", self._page, syllables)
            return
        self._cursor = RevealCursor(sentence, self._policy)
        self._status = SentenceStatus.READY

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    async def advance(self) -> Step:
        if self._cursor is None:
            return Step.IGNORED
        step = self._cursor.advance()
        if step is Step.NEXT_PAGE:
            await self.next_page()
        return step

    async def retreat(self) -> Step:
        if self._cursor is None:
            return Step.IGNORED
        step = self._cursor.retreat()
        if step is Step.PREVIOUS_PAGE:
            await self.previous_page()
        return step

    async def handle(self, action: InputAction) -> Step:
        """Dispatch one input action."""
        action = InputAction(action)
        if action is InputAction.ADVANCE:
            return await self.advance()
        if action is InputAction.RETREAT:
            return await self.retreat()
        if action is InputAction.NEXT_PAGE:
            await self.next_page()
            return Step.NEXT_PAGE
        await self.previous_page()
        return Step.PREVIOUS_PAGE
