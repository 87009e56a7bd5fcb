"""Async HTTP client for the remote word store and the syllabify function.

WHY: Words and learning sets live in a hosted relational store reached
over its REST interface, and sentences without stored syllables are
split by a serverless function that calls a generative AI model. This
module keeps all of that HTTP detail behind one client class so
sessions, the CLI, and tests don't need to know URLs or headers.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. CzytamClient is an
async context manager: enter it to get an authenticated client, exit to
close the connection pool. CRUD methods target ``/rest/v1/{table}`` with
``id=eq.{id}`` filters; syllabify() posts to ``{functions}/syllabify-text``.

RULES:
- Always use the async context manager (async with CzytamClient() as client:)
- Both the apikey header and the Bearer token carry the anon key
- Inserts/updates ask for ``Prefer: return=representation`` and return
  the stored record
- Any non-2xx reply, non-JSON body, or transport failure raises
  UpstreamServiceError
- No retries here; callers surface the error and let the user retry
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from czytam.api.models import LearningSet, Word
from czytam.config import CZYTAM_HTTP_TIMEOUT_S, load_supabase_settings

logger = logging.getLogger(__name__)

_WORDS_TABLE = "words"
_SETS_TABLE = "learning_sets"
_SYLLABIFY_FUNCTION = "syllabify-text"


class UpstreamServiceError(Exception):
    """Raised when the remote store or a serverless function fails.

    WHY: Sessions need one typed exception to turn into a user-visible
    error state, whatever went wrong on the wire.

    RULES:
    - status_code is the HTTP status, or 0 for transport failures
    - message is the reply's error field, body text, or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__("Upstream service error {}: {}".format(status_code, message))


def _error_message(resp: httpx.Response) -> str:
    """Pull a readable message out of an error reply."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict):
        return str(data.get("error") or data.get("message") or data)
    return resp.text


class CzytamClient:
    """Async client for the remote store and the syllabify function.

    WHY: Provides a clean, typed interface for the few remote calls the
    trainer makes: word and set CRUD plus sentence syllabification.

    HOW: Wraps httpx.AsyncClient with the anon key headers. Each call is
    an async method returning parsed dataclasses.

    RULES:
    - Use as: async with CzytamClient() as client: ...
    - base_url / anon_key / functions_url default to load_supabase_settings()
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        functions_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if base_url is None or anon_key is None:
            settings = load_supabase_settings()
            base_url = base_url or settings.url
            anon_key = anon_key or settings.anon_key
            functions_url = functions_url or settings.functions_url
        self._base_url = base_url.rstrip("/")
        self._anon_key = anon_key
        self._functions_url = (functions_url or "{}/functions/v1".format(self._base_url)).rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> CzytamClient:
        self._client = httpx.AsyncClient(
            headers={
                "apikey": self._anon_key,
                "Authorization": "Bearer {}".format(self._anon_key),
            },
            timeout=httpx.Timeout(CZYTAM_HTTP_TIMEOUT_S, connect=10.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "CzytamClient must be used as an async context manager: "
                "async with CzytamClient() as client: ..."
            )
        return self._client

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = self._ensure_client()
        try:
            resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise UpstreamServiceError(0, str(exc) or exc.__class__.__name__) from exc

        if not resp.is_success:
            raise UpstreamServiceError(resp.status_code, _error_message(resp))
        return resp

    def _table_url(self, table: str) -> str:
        return "{}/rest/v1/{}".format(self._base_url, table)

    # ------------------------------------------------------------------
    # Syllabify function
    # ------------------------------------------------------------------

    async def syllabify(self, text: str) -> str:
        """Split every word of ``text`` into syllables.

        WHY: Older booklets were saved before syllables were stored with
        each sentence; those pages are syllabified on first display.

        HOW: POSTs ``{"text": text}`` to the syllabify-text function and
        returns its ``syllabified`` field, e.g. "KO·T PI·JE WO·DĘ.".

        RULES:
        - Returns the string unchanged (the tokenizer copes with noise)
        - Raises UpstreamServiceError on failure or a reply without
          the ``syllabified`` field
        """
        url = "{}/{}".format(self._functions_url, _SYLLABIFY_FUNCTION)
        resp = await self._request("POST", url, json={"text": text})
        data = _json(resp)
        result = data.get("syllabified") if isinstance(data, dict) else None
        if not isinstance(result, str):
            raise UpstreamServiceError(resp.status_code, "Reply has no 'syllabified' field")
        return result

    # ------------------------------------------------------------------
    # Words
    # ------------------------------------------------------------------

    async def fetch_words(self) -> List[Word]:
        """Return the whole word library, oldest first."""
        resp = await self._request(
            "GET",
            self._table_url(_WORDS_TABLE),
            params={"select": "*", "order": "created_at.asc"},
        )
        return [Word.from_dict(row) for row in _json(resp)]

    async def create_word(self, word: Word) -> Word:
        resp = await self._request(
            "POST",
            self._table_url(_WORDS_TABLE),
            json=word.to_dict(),
            headers={"Prefer": "return=representation"},
        )
        return Word.from_dict(_single_row(resp))

    async def update_word(self, word_id: int, word: Word) -> Word:
        resp = await self._request(
            "PATCH",
            self._table_url(_WORDS_TABLE),
            params={"id": "eq.{}".format(word_id)},
            json=word.to_dict(),
            headers={"Prefer": "return=representation"},
        )
        return Word.from_dict(_single_row(resp))

    async def delete_word(self, word_id: int) -> None:
        await self._request(
            "DELETE",
            self._table_url(_WORDS_TABLE),
            params={"id": "eq.{}".format(word_id)},
        )

    # ------------------------------------------------------------------
    # Learning sets
    # ------------------------------------------------------------------

    async def fetch_sets(self) -> List[LearningSet]:
        """Return all learning sets, newest first."""
        resp = await self._request(
            "GET",
            self._table_url(_SETS_TABLE),
            params={"select": "*", "order": "created_at.desc"},
        )
        return [LearningSet.from_dict(row) for row in _json(resp)]

    async def get_set(self, set_id: int) -> Optional[LearningSet]:
        """Return one learning set, or None if no row has that id."""
        resp = await self._request(
            "GET",
            self._table_url(_SETS_TABLE),
            params={"select": "*", "id": "eq.{}".format(set_id)},
        )
        rows = _json(resp)
        if not rows:
            return None
        return LearningSet.from_dict(rows[0])

    async def create_set(self, learning_set: LearningSet) -> LearningSet:
        resp = await self._request(
            "POST",
            self._table_url(_SETS_TABLE),
            json=learning_set.to_dict(),
            headers={"Prefer": "return=representation"},
        )
        return LearningSet.from_dict(_single_row(resp))

    async def update_set(self, set_id: int, learning_set: LearningSet) -> LearningSet:
        resp = await self._request(
            "PATCH",
            self._table_url(_SETS_TABLE),
            params={"id": "eq.{}".format(set_id)},
            json=learning_set.to_dict(),
            headers={"Prefer": "return=representation"},
        )
        return LearningSet.from_dict(_single_row(resp))

    async def delete_set(self, set_id: int) -> None:
        await self._request(
            "DELETE",
            self._table_url(_SETS_TABLE),
            params={"id": "eq.{}".format(set_id)},
        )


def _single_row(resp: httpx.Response) -> dict:
    """Unwrap the one-row list returned with ``return=representation``."""
    data = _json(resp)
    if isinstance(data, list):
        if not data:
            raise UpstreamServiceError(resp.status_code, "Empty reply, expected one row")
        return data[0]
    return data


def _json(resp: httpx.Response) -> Any:
    """Parse a successful reply, treating a non-JSON body as an upstream failure."""
    try:
        return resp.json()
    except ValueError as exc:
        logger.warning("%s %s returned a non-JSON body", resp.request.method, resp.request.url)
        raise UpstreamServiceError(resp.status_code, "Reply is not JSON") from exc
