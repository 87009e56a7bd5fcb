"""Configuration constants, notation symbols, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. The syllable notation, remote service URLs, and
session limits are plain data rather than buried in logic, so both the
engine and its callers read them from one place.

HOW: python-dotenv loads the .env file on import. Constants are defined
at module level from os.getenv with defaults. load_supabase_settings()
provides a clear error when the remote store is not configured.

RULES:
- SYLLABLE_SEPARATOR is the middle dot (U+00B7), WORD_SEPARATOR a single space
- Supabase URL and anon key come from .env, never hardcoded
- CZYTAM_FUNCTIONS_URL defaults to {SUPABASE_URL}/functions/v1
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Syllable notation
# ---------------------------------------------------------------------------

SYLLABLE_SEPARATOR = "·"
"""Middle dot separating syllables inside a word, e.g. "KO·T"."""

WORD_SEPARATOR = " "
"""Single ASCII space separating words."""

# ---------------------------------------------------------------------------
# Remote store and serverless functions
# ---------------------------------------------------------------------------

SUPABASE_URL = os.getenv("SUPABASE_URL", "").strip().rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "").strip()
CZYTAM_FUNCTIONS_URL = os.getenv("CZYTAM_FUNCTIONS_URL", "").strip().rstrip("/")
CZYTAM_HTTP_TIMEOUT_S = float(os.getenv("CZYTAM_HTTP_TIMEOUT_S", "60"))

_PLACEHOLDER_KEYS = frozenset({"", "TWOJ_KLUCZ_ANON"})

# ---------------------------------------------------------------------------
# Practice sessions
# ---------------------------------------------------------------------------

CZYTAM_SESSION_TTL_S = int(os.getenv("CZYTAM_SESSION_TTL_S", "3600"))
CZYTAM_MAX_SESSIONS = int(os.getenv("CZYTAM_MAX_SESSIONS", "100"))

MEMORY_MAX_PAIRS = 10
"""Memory game deck size limit (pairs), so the board fits on one screen."""


@dataclass(frozen=True)
class SupabaseSettings:
    """Resolved connection settings for the remote store and functions."""

    url: str
    anon_key: str
    functions_url: str


def load_supabase_settings() -> SupabaseSettings:
    """Load the remote store settings from the environment.

    WHY: Every remote call (CRUD and syllabify) needs the project URL and
    the anon key. Loading them from the environment keeps them out of
    source code.

    HOW: Reads SUPABASE_URL / SUPABASE_ANON_KEY (populated by
    python-dotenv). The functions URL falls back to the project URL.

    RULES:
    - Raises ValueError if the URL or key is missing or a placeholder
    - Never returns a default/placeholder value
    """
    if not SUPABASE_URL:
        raise ValueError(
            "Supabase URL not configured. "
            "Add SUPABASE_URL to the .env file in the app folder."
        )
    if SUPABASE_ANON_KEY in _PLACEHOLDER_KEYS:
        raise ValueError(
            "Supabase anon key not configured. "
            "Add SUPABASE_ANON_KEY to the .env file in the app folder."
        )
    functions_url = CZYTAM_FUNCTIONS_URL or "{}/functions/v1".format(SUPABASE_URL)
    return SupabaseSettings(
        url=SUPABASE_URL,
        anon_key=SUPABASE_ANON_KEY,
        functions_url=functions_url,
    )
