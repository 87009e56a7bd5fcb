"""Tests for the FastAPI practice API.

WHY: The HTTP layer is how a tablet front end drives the engine. Each
endpoint must translate sessions into drawable state and map every
failure onto the documented status codes.

HOW: FastAPI TestClient (synchronous, in-process). The syllabify
function is replaced through get_syllabifier, and the remote store is
replaced by a CzytamClient running on httpx.MockTransport. Organized by
endpoint and mode.

RULES:
- The session store is cleared before and after each test
- No test touches the network
- Tests cover happy paths, 400, 404, 409, 429, 502 and 503
"""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from czytam import config
from czytam.api.client import CzytamClient, UpstreamServiceError
from czytam.server import app as app_module
from czytam.server.app import app, session_store

KOT = {"text": "Kot pije wodę.", "syllables": "KO·T PI·JE WO·DĘ", "image_url": "https://img.example/p1.png"}
FOKA = {"text": "Foka.", "syllables": "FO·KA", "image_url": "https://img.example/p2.png"}
ALA = {"text": "Ala ma kota."}

WORDS = [
    {"text": "piłka", "syllables": ["pił", "ka"], "image_url": "https://img.example/pilka.png", "id": 1},
    {"text": "kot", "syllables": ["kot"], "id": 2},
    {"text": "mama", "syllables": ["ma", "ma"], "id": 3},
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_session_store():
    """Clear all sessions before each test to ensure isolation."""
    session_store._sessions.clear()
    yield
    session_store._sessions.clear()


@pytest.fixture
def syllabify_calls(monkeypatch):
    """Install a fake remote syllabifier; returns the list of texts it saw."""
    calls = []

    async def fake(text):
        calls.append(text)
        return "A·LA MA KO·TA."

    monkeypatch.setattr(app_module, "get_syllabifier", lambda: fake)
    return calls


@pytest.fixture
def no_syllabifier(monkeypatch):
    monkeypatch.setattr(app_module, "get_syllabifier", lambda: None)


@pytest.fixture
def client():
    return TestClient(app)


def _create(client, mode, **body):
    body["mode"] = mode
    return client.post("/sessions", json=body)


def _act(client, session_id, **body):
    return client.post("/sessions/{}/actions".format(session_id), json=body)


def _remote_store(monkeypatch, sets, words=WORDS, status_code=200):
    """Point the app's CzytamClient at a MockTransport serving ``sets`` and ``words``."""

    def handler(request):
        if status_code != 200:
            return httpx.Response(status_code, json={"message": "database offline"})
        if request.url.path.endswith("/learning_sets"):
            wanted = request.url.params["id"]
            rows = [s for s in sets if "eq.{}".format(s["id"]) == wanted]
            return httpx.Response(200, json=rows)
        return httpx.Response(200, json=words)

    monkeypatch.setattr(
        app_module,
        "CzytamClient",
        lambda: CzytamClient(
            base_url="https://proj.supabase.co",
            anon_key="anon-key",
            transport=httpx.MockTransport(handler),
        ),
    )


# ---------------------------------------------------------------------------
# POST /sessions
# ---------------------------------------------------------------------------


class TestCreateSession:
    def test_card_show_returns_201(self, client):
        resp = _create(client, "Pokaz kart", words=WORDS)
        assert resp.status_code == 201
        data = resp.json()
        assert data["mode"] == "Pokaz kart"
        assert data["status"] == "ready"
        assert data["label"] == "1 / 3"
        assert [t["text"] for t in data["tokens"]] == ["pił", "ka"]
        assert all(t["visibility"] == "dimmed" for t in data["tokens"])
        assert data["image_url"] == "https://img.example/pilka.png"

    def test_booklet_opens_first_page(self, client, no_syllabifier):
        resp = _create(client, "Książeczka", sentences=[KOT, FOKA])
        data = resp.json()
        assert data["status"] == "ready"
        assert data["label"] == "1 / 2"
        assert len(data["tokens"]) == 8
        assert data["tokens"][2]["visibility"] == "space"
        assert data["image_url"] == KOT["image_url"]

    def test_discovery_hides_picture(self, client, no_syllabifier):
        data = _create(client, "Książeczka 2.0 - Odkrywanie", sentences=[KOT]).json()
        assert data["image_url"] is None
        assert data["image_revealed"] is False

    def test_booklet_page_syllabified_remotely(self, client, syllabify_calls):
        data = _create(client, "Książeczka", sentences=[ALA]).json()
        assert syllabify_calls == ["Ala ma kota."]
        assert data["status"] == "ready"
        assert [t["text"] for t in data["tokens"] if t["visibility"] != "space"] == ["A", "LA", "MA", "KO", "TA."]

    def test_booklet_without_syllabifier_fails_page(self, client, no_syllabifier):
        data = _create(client, "Książeczka", sentences=[ALA]).json()
        assert data["status"] == "failed"
        assert data["tokens"] == []
        assert data["error"]

    def test_unknown_mode_returns_400(self, client):
        resp = _create(client, "Karaoke", words=WORDS)
        assert resp.status_code == 400
        assert "Unknown mode" in resp.json()["detail"]

    def test_word_mode_without_words_returns_400(self, client):
        assert _create(client, "Pokaz kart").status_code == 400

    def test_booklet_without_sentences_returns_400(self, client):
        assert _create(client, "Książeczka", words=WORDS).status_code == 400

    def test_card_show_with_only_blank_words_returns_400(self, client):
        resp = _create(client, "Pokaz kart", words=[{"text": " "}])
        assert resp.status_code == 400
        assert "nothing to read" in resp.json()["detail"]

    def test_memory_without_ids_returns_400(self, client):
        resp = _create(client, "Memory", words=[{"text": "kot"}])
        assert resp.status_code == 400

    def test_too_many_sessions_returns_429(self, client, monkeypatch):
        monkeypatch.setattr(session_store, "max_sessions", 1)
        assert _create(client, "Pokaz kart", words=WORDS).status_code == 201
        resp = _create(client, "Pokaz kart", words=WORDS)
        assert resp.status_code == 429

    def test_non_json_syllabify_reply_fails_page(self, client, monkeypatch):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        async def syllabify(text):
            remote = CzytamClient(
                base_url="https://proj.supabase.co",
                anon_key="anon-key",
                transport=httpx.MockTransport(handler),
            )
            async with remote:
                return await remote.syllabify(text)

        monkeypatch.setattr(app_module, "get_syllabifier", lambda: syllabify)
        resp = _create(client, "Książeczka", sentences=[ALA])
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "failed"
        assert data["error"] == "Reply is not JSON"

    def test_session_dropped_when_opening_crashes(self, client, monkeypatch):
        async def broken(text):
            raise RuntimeError("boom")

        monkeypatch.setattr(app_module, "get_syllabifier", lambda: broken)
        with pytest.raises(RuntimeError):
            _create(client, "Książeczka", sentences=[ALA])
        assert session_store.list_sessions() == []


class TestCreateFromLearningSet:
    def test_booklet_from_set_uses_image_lookup(self, client, monkeypatch, no_syllabifier):
        _remote_store(monkeypatch, sets=[{
            "id": 5,
            "name": "Kot",
            "type": "Książeczka",
            "sentences": [KOT, FOKA],
        }])
        data = _create(client, "Książeczka", set_id=5).json()
        assert data["label"] == "1 / 2"
        assert data["image_url"] == KOT["image_url"]

    def test_card_show_from_set_keeps_set_order(self, client, monkeypatch):
        _remote_store(monkeypatch, sets=[{
            "id": 6,
            "name": "Dom",
            "type": "Karty obrazkowe",
            "wordIds": ["3", "1", "42"],
        }])
        data = _create(client, "Pokaz kart", set_id=6).json()
        assert data["label"] == "1 / 2"
        assert [t["text"] for t in data["tokens"]] == ["ma", "ma"]

    def test_missing_set_returns_404(self, client, monkeypatch):
        _remote_store(monkeypatch, sets=[])
        resp = _create(client, "Pokaz kart", set_id=99)
        assert resp.status_code == 404

    def test_remote_failure_returns_502(self, client, monkeypatch):
        _remote_store(monkeypatch, sets=[], status_code=500)
        resp = _create(client, "Pokaz kart", set_id=1)
        assert resp.status_code == 502
        assert resp.json()["detail"] == "database offline"

    def test_unconfigured_store_returns_503(self, client, monkeypatch):
        monkeypatch.setattr(config, "SUPABASE_URL", "")
        resp = _create(client, "Pokaz kart", set_id=1)
        assert resp.status_code == 503


# ---------------------------------------------------------------------------
# POST /sessions/{id}/actions
# ---------------------------------------------------------------------------


class TestReadingActions:
    def test_advance_emphasizes_syllable(self, client, no_syllabifier):
        session_id = _create(client, "Książeczka", sentences=[KOT]).json()["id"]
        resp = _act(client, session_id, action="advance")
        assert resp.status_code == 200
        data = resp.json()
        assert data["result"] == "moved"
        tokens = data["state"]["tokens"]
        assert tokens[0] == {"index": 0, "text": "KO", "visibility": "emphasized", "active": True}
        assert tokens[1]["visibility"] == "dimmed"

    def test_discovery_walk_reveals_picture_then_turns_page(self, client, no_syllabifier):
        session_id = _create(client, "Książeczka 2.0 - Odkrywanie", sentences=[FOKA, KOT]).json()["id"]
        results = [_act(client, session_id, key=" ").json() for _ in range(5)]
        assert [r["result"] for r in results] == [
            "moved", "moved", "completed", "image_revealed", "next_page",
        ]
        assert results[2]["state"]["image_url"] is None
        assert results[3]["state"]["image_url"] == FOKA["image_url"]
        assert results[4]["state"]["label"] == "2 / 2"

    def test_discovery_arrow_turns_page(self, client, no_syllabifier):
        session_id = _create(client, "Książeczka 2.0 - Odkrywanie", sentences=[KOT, FOKA]).json()["id"]
        data = _act(client, session_id, key="ArrowRight").json()
        assert data["result"] == "next_page"
        assert data["state"]["label"] == "2 / 2"

    def test_card_show_wraps_to_next_card(self, client):
        session_id = _create(client, "Pokaz kart", words=WORDS).json()["id"]
        for _ in range(3):
            _act(client, session_id, key="ArrowRight")
        data = _act(client, session_id, key="ArrowRight").json()
        assert data["result"] == "next_page"
        assert data["state"]["label"] == "2 / 3"

    def test_not_ready_page_returns_409(self, client, no_syllabifier):
        session_id = _create(client, "Książeczka", sentences=[ALA, KOT]).json()["id"]
        resp = _act(client, session_id, action="advance")
        assert resp.status_code == 409
        assert "failed" in resp.json()["detail"]

    def test_page_turn_allowed_when_not_ready(self, client, no_syllabifier):
        session_id = _create(client, "Książeczka", sentences=[ALA, KOT]).json()["id"]
        data = _act(client, session_id, action="next_page").json()
        assert data["state"]["status"] == "ready"

    def test_retry_after_failure(self, client, monkeypatch):
        calls = []

        async def flaky(text):
            calls.append(text)
            if len(calls) == 1:
                raise UpstreamServiceError(503, "busy")
            return "A·LA MA KO·TA."

        monkeypatch.setattr(app_module, "get_syllabifier", lambda: flaky)
        created = _create(client, "Książeczka", sentences=[ALA]).json()
        assert created["status"] == "failed"
        assert created["error"] == "busy"
        data = _act(client, created["id"], action="retry").json()
        assert data["result"] == "ready"
        assert data["state"]["error"] is None

    def test_unknown_action_returns_400(self, client):
        session_id = _create(client, "Pokaz kart", words=WORDS).json()["id"]
        assert _act(client, session_id, action="jump").status_code == 400

    def test_unbound_key_returns_400(self, client):
        session_id = _create(client, "Pokaz kart", words=WORDS).json()["id"]
        assert _act(client, session_id, key="Enter").status_code == 400

    def test_missing_action_returns_400(self, client):
        session_id = _create(client, "Pokaz kart", words=WORDS).json()["id"]
        assert _act(client, session_id).status_code == 400

    def test_unknown_session_returns_404(self, client):
        assert _act(client, "missing", action="advance").status_code == 404


class TestGameActions:
    def test_motion_toggle(self, client):
        session_id = _create(client, "Sylaby w ruchu", words=WORDS).json()["id"]
        data = _act(client, session_id, action="toggle").json()
        assert data["result"] == "split"
        assert data["state"]["pieces"] == ["pił", "ka"]
        data = _act(client, session_id, action="next_word").json()
        assert data["state"]["pieces"] == ["kot"]

    def test_motion_rejects_reading_actions(self, client):
        session_id = _create(client, "Sylaby w ruchu", words=WORDS).json()["id"]
        assert _act(client, session_id, action="advance").status_code == 400

    def test_memory_board_starts_face_down(self, client):
        data = _create(client, "Memory", words=WORDS, seed=1).json()
        assert len(data["cards"]) == 6
        assert not any(card["face_up"] for card in data["cards"])
        assert all(card["text"] is None for card in data["cards"])
        assert data["finished"] is False

    def test_memory_flip_shows_card(self, client):
        session_id = _create(client, "Memory", words=WORDS, seed=1).json()["id"]
        data = _act(client, session_id, action="flip", index=0).json()
        assert data["result"] == "flipped"
        card = data["state"]["cards"][0]
        assert card["face_up"] is True
        assert card["kind"] == "word"
        assert card["text"] in {"piłka", "kot", "mama"}

    def test_memory_image_word_variant(self, client):
        data = _create(client, "Memory", words=WORDS, variant="image-word", seed=1).json()
        assert sorted(card["kind"] for card in data["cards"]) == ["image"] * 3 + ["word"] * 3

    def test_memory_flip_needs_index(self, client):
        session_id = _create(client, "Memory", words=WORDS, seed=1).json()["id"]
        assert _act(client, session_id, action="flip").status_code == 400
        assert _act(client, session_id, action="flip", index=6).status_code == 400

    def test_memory_resolve(self, client):
        session_id = _create(client, "Memory", words=WORDS, seed=1).json()["id"]
        _act(client, session_id, action="flip", index=0)
        data = _act(client, session_id, action="resolve").json()
        assert data["result"] == "resolved"
        assert not data["state"]["cards"][0]["face_up"]


# ---------------------------------------------------------------------------
# GET / DELETE /sessions/{id}
# ---------------------------------------------------------------------------


class TestGetAndDeleteSession:
    def test_get_returns_state(self, client):
        session_id = _create(client, "Pokaz kart", words=WORDS).json()["id"]
        _act(client, session_id, action="advance")
        data = client.get("/sessions/{}".format(session_id)).json()
        assert data["tokens"][0]["active"] is True

    def test_get_unknown_returns_404(self, client):
        assert client.get("/sessions/missing").status_code == 404

    def test_delete(self, client):
        session_id = _create(client, "Pokaz kart", words=WORDS).json()["id"]
        assert client.delete("/sessions/{}".format(session_id)).status_code == 204
        assert client.get("/sessions/{}".format(session_id)).status_code == 404

    def test_delete_unknown_returns_404(self, client):
        assert client.delete("/sessions/missing").status_code == 404


# ---------------------------------------------------------------------------
# Modes, health, schema
# ---------------------------------------------------------------------------


class TestModesAndHealth:
    def test_list_modes(self, client):
        data = client.get("/modes").json()
        assert [m["value"] for m in data] == [
            "Pokaz kart",
            "Książeczka",
            "Książeczka 2.0 - Odkrywanie",
            "Sylaby w ruchu",
            "Memory",
        ]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "version": "0.1.0"}

    def test_openapi_schema_lists_endpoints(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert "/sessions" in paths
        assert "/sessions/{session_id}/actions" in paths


class TestGetSyllabifier:
    def test_none_when_not_configured(self, monkeypatch):
        monkeypatch.setattr(config, "SUPABASE_URL", "")
        assert app_module.get_syllabifier() is None

    def test_remote_when_configured(self, monkeypatch):
        monkeypatch.setattr(config, "SUPABASE_URL", "https://proj.supabase.co")
        monkeypatch.setattr(config, "SUPABASE_ANON_KEY", "anon-key")
        assert app_module.get_syllabifier() is not None
