"""FastAPI application exposing practice sessions over HTTP.

WHY: The reading engine is pure Python; a tablet front end, a kiosk page
or a quick curl session needs it over HTTP. Each tap or key press is one
request, and the response is everything the view has to draw.

HOW: POST /sessions builds the mode's session object from the words or
sentences in the body (or from a learning set in the remote store when
only set_id is given) and keeps it in an in-memory SessionStore. POST
/sessions/{id}/actions forwards one action into the session; GET reads
the current state; DELETE drops it. A lifespan task expires idle
sessions.

RULES:
- Error responses use the ErrorResponse schema
- 400 unknown mode, action or key, or missing words/sentences
- 404 unknown session or learning set
- 409 reading input on a booklet page that is not ready
- 429 too many live sessions
- 502 remote store failure, 503 remote store not configured
- Booklet pages without stored syllables use the remote syllabify
  function when the remote store is configured
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from czytam import __version__
from czytam.api.client import CzytamClient, UpstreamServiceError
from czytam.api.models import LearningMode, Sentence, Word, build_image_lookup
from czytam.config import load_supabase_settings
from czytam.core.cards import FullCard, ImageCard, MemoryGame, WordCard, build_memory_deck
from czytam.core.cursor import RevealCursor
from czytam.server.models import (
    ActionRequest,
    ActionResponse,
    CardOut,
    CreateSessionRequest,
    ErrorResponse,
    HealthResponse,
    ModeInfo,
    SessionStateResponse,
    TokenOut,
)
from czytam.server.sessions import PracticeSession, SessionStore
from czytam.sessions.booklet import BookletSession, SentenceStatus, Syllabifier
from czytam.sessions.card_show import CardShowSession
from czytam.sessions.input import InputAction, action_for_key
from czytam.sessions.motion import SyllablesInMotionSession

logger = logging.getLogger(__name__)

_WORD_MODES = (
    LearningMode.CARD_SHOW,
    LearningMode.SYLLABLES_IN_MOTION,
    LearningMode.MEMORY,
)
_BOOKLET_MODES = (LearningMode.BOOKLET, LearningMode.BOOKLET_DISCOVERY)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Expire idle sessions every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Czytam Practice API",
    description=(
        "Interactive early-reading practice sessions: syllable-by-syllable "
        "card show, linear and discovery booklets, syllables in motion and "
        "memory. Create a session, send taps and key presses, and draw the "
        "returned state."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Remote store
# ---------------------------------------------------------------------------


async def _remote_syllabify(text: str) -> str:
    async with CzytamClient() as client:
        return await client.syllabify(text)


def get_syllabifier() -> Optional[Syllabifier]:
    """Return the remote syllabify function, or None when not configured."""
    try:
        load_supabase_settings()
    except ValueError as exc:
        logger.info("Remote syllabify unavailable: %s", exc)
        return None
    return _remote_syllabify


async def _load_set(set_id: int) -> Tuple[List[Word], List[Sentence], dict]:
    """Fetch a learning set and its words from the remote store.

    RULES:
    - Words come back in the set's word_ids order; ids missing from the
      library are skipped
    - Raises HTTPException 404/502/503 for a missing set, a failed call,
      or an unconfigured store
    """
    try:
        async with CzytamClient() as client:
            learning_set = await client.get_set(set_id)
            if learning_set is None:
                raise HTTPException(
                    status_code=404,
                    detail="Learning set not found: {}".format(set_id),
                )
            library = await client.fetch_words() if learning_set.word_ids else []
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except UpstreamServiceError as exc:
        logger.warning("Loading learning set %s failed: %s", set_id, exc)
        raise HTTPException(status_code=502, detail=exc.message)

    by_id = {w.id: w for w in library}
    words = [by_id[i] for i in learning_set.word_ids if i in by_id]
    return words, learning_set.sentences, build_image_lookup([learning_set])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_mode(value: str) -> LearningMode:
    try:
        return LearningMode(value)
    except ValueError:
        available = ", ".join("'{}'".format(m.value) for m in LearningMode)
        raise HTTPException(
            status_code=400,
            detail="Unknown mode '{}'. Available: {}".format(value, available),
        )


def _parse_input(value: str) -> InputAction:
    try:
        return InputAction(value)
    except ValueError:
        available = ", ".join(a.value for a in InputAction)
        raise HTTPException(
            status_code=400,
            detail="Unknown action '{}'. Available: {}".format(value, available),
        )


def _require(session_id: str) -> PracticeSession:
    session = session_store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return session


def _token_models(tokens) -> List[TokenOut]:
    return [
        TokenOut(index=t.index, text=t.text, visibility=t.visibility.value, active=t.active)
        for t in tokens
    ]


def _cursor_flags(cursor: Optional[RevealCursor]) -> dict:
    if cursor is None:
        return {"sentence_completed": False, "image_revealed": False}
    return {
        "sentence_completed": cursor.sentence_completed,
        "image_revealed": cursor.image_revealed,
    }


def _card_model(index: int, card, game: MemoryGame) -> CardOut:
    face_up = game.is_face_up(index)
    if isinstance(card, ImageCard):
        kind, text, image_url = "image", None, card.image_url
    elif isinstance(card, WordCard):
        kind, text, image_url = "word", card.text, None
    else:
        kind, text, image_url = "full", card.text, card.image_url
    return CardOut(
        index=index,
        kind=kind,
        face_up=face_up,
        matched=index in game.matched,
        text=text if face_up else None,
        image_url=(image_url or None) if face_up else None,
    )


def _state_response(session: PracticeSession) -> SessionStateResponse:
    """Flatten a live session into what a view draws."""
    state = session.state
    response = SessionStateResponse(id=session.id, mode=session.mode.value, status="ready")

    if isinstance(state, BookletSession):
        response.status = state.status.value
        response.label = state.page_label
        response.tokens = _token_models(state.tokens())
        response.error = state.error
        if state.image_visible:
            response.image_url = state.image_url
        flags = _cursor_flags(state.cursor)
        response.sentence_completed = flags["sentence_completed"]
        response.image_revealed = flags["image_revealed"]
    elif isinstance(state, CardShowSession):
        response.label = state.card_label
        response.tokens = _token_models(state.tokens())
        response.image_url = state.word.image_url or None
        response.sentence_completed = state.cursor.sentence_completed
    elif isinstance(state, SyllablesInMotionSession):
        response.pieces = state.pieces
        response.image_url = state.word.image_url or None
    elif isinstance(state, MemoryGame):
        response.cards = [_card_model(i, card, state) for i, card in enumerate(state.cards)]
        response.finished = state.is_finished

    return response


async def _apply_action(session: PracticeSession, request: ActionRequest) -> str:
    """Forward one action into the session; returns the outcome name."""
    state = session.state
    action = request.action
    if request.key is not None:
        bound = action_for_key(session.mode, request.key)
        if bound is None:
            raise HTTPException(
                status_code=400,
                detail="Key {!r} is not bound in mode '{}'".format(request.key, session.mode.value),
            )
        action = bound.value
    if not action:
        raise HTTPException(status_code=400, detail="Either action or key is required")

    if isinstance(state, MemoryGame):
        if action == "resolve":
            state.resolve()
            return "resolved"
        if action != "flip":
            raise HTTPException(status_code=400, detail="Unknown action '{}'. Available: flip, resolve".format(action))
        if request.index is None or not 0 <= request.index < len(state.cards):
            raise HTTPException(status_code=400, detail="flip needs a card index in range")
        return state.flip(request.index).value

    if isinstance(state, SyllablesInMotionSession):
        if action == "toggle":
            return "split" if state.toggle() else "joined"
        if action == "next_word":
            state.next_word()
            return "next_word"
        raise HTTPException(status_code=400, detail="Unknown action '{}'. Available: toggle, next_word".format(action))

    if isinstance(state, BookletSession):
        if action == "retry":
            await state.retry()
            return state.status.value
        input_action = _parse_input(action)
        if (
            input_action in (InputAction.ADVANCE, InputAction.RETREAT)
            and state.status is not SentenceStatus.READY
        ):
            raise HTTPException(
                status_code=409,
                detail="Page is not ready (current status: {}).".format(state.status.value),
            )
        return (await state.handle(input_action)).value

    return state.handle(_parse_input(action)).value


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionStateResponse,
    status_code=201,
    tags=["sessions"],
    summary="Start a practice session",
    description=(
        "Create a session for a learning mode over the supplied words or "
        "sentences. With only set_id, the set is loaded from the remote store. "
        "Booklet sessions open their first page before the response is sent."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unknown mode or missing content"},
        404: {"model": ErrorResponse, "description": "Learning set not found"},
        429: {"model": ErrorResponse, "description": "Too many live sessions"},
        502: {"model": ErrorResponse, "description": "Remote store failure"},
        503: {"model": ErrorResponse, "description": "Remote store not configured"},
    },
)
async def create_session(request: CreateSessionRequest) -> SessionStateResponse:
    mode = _parse_mode(request.mode)
    words = [w.to_word() for w in request.words]
    sentences = [s.to_sentence() for s in request.sentences]
    images: dict = {}

    if request.set_id is not None and not words and not sentences:
        words, sentences, images = await _load_set(request.set_id)

    if mode in _WORD_MODES and not words:
        raise HTTPException(
            status_code=400,
            detail="Mode '{}' needs at least one word".format(mode.value),
        )
    if mode in _BOOKLET_MODES and not sentences:
        raise HTTPException(
            status_code=400,
            detail="Mode '{}' needs at least one sentence".format(mode.value),
        )

    if mode is LearningMode.CARD_SHOW:
        try:
            state = CardShowSession(words)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    elif mode is LearningMode.SYLLABLES_IN_MOTION:
        state = SyllablesInMotionSession(words)
    elif mode is LearningMode.MEMORY:
        deck = build_memory_deck(words, request.variant, rng=random.Random(request.seed))
        if not deck:
            raise HTTPException(status_code=400, detail="Memory needs words with ids")
        state = MemoryGame(deck)
    else:
        state = BookletSession.for_mode(
            mode,
            sentences,
            syllabifier=get_syllabifier(),
            images=images,
            set_id=request.set_id,
        )

    try:
        session = session_store.create_session(mode, state)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))

    if isinstance(state, BookletSession):
        try:
            await state.open()
        except Exception:
            session_store.delete_session(session.id)
            raise

    return _state_response(session)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionStateResponse,
    tags=["sessions"],
    summary="Get session state",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_session(session_id: str) -> SessionStateResponse:
    return _state_response(_require(session_id))


@app.post(
    "/sessions/{session_id}/actions",
    response_model=ActionResponse,
    tags=["sessions"],
    summary="Send one input action",
    description=(
        "Forward a tap, key press or game move into the session and return "
        "the outcome with the new state. Send either an action name or a "
        "keyboard key; keys use the mode's bindings."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unknown action or unbound key"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Booklet page not ready"},
    },
)
async def send_action(session_id: str, request: ActionRequest) -> ActionResponse:
    session = _require(session_id)
    result = await _apply_action(session, request)
    return ActionResponse(result=result, state=_state_response(session))


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="End a practice session",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Modes and health
# ---------------------------------------------------------------------------


@app.get(
    "/modes",
    response_model=List[ModeInfo],
    tags=["modes"],
    summary="List learning modes",
)
async def list_modes() -> List[ModeInfo]:
    return [ModeInfo(value=m.value, name=m.name) for m in LearningMode]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the czytam-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
