"""Per-token render snapshot shared by the reading modes.

WHY: After every transition the view re-renders each token. Callers
(the HTTP API, the CLI) want one flat list with text, visibility, and
the underline marker instead of querying the cursor token by token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from czytam.core.cursor import RevealCursor, Visibility


@dataclass(frozen=True)
class TokenView:
    index: int
    text: str
    visibility: Visibility
    active: bool = False


def render_tokens(cursor: Optional[RevealCursor]) -> List[TokenView]:
    """Snapshot every token of the cursor's sentence; [] without a cursor."""
    if cursor is None:
        return []
    sentence = cursor.sentence
    active = cursor.active_index
    return [
        TokenView(
            index=i,
            text=sentence.text_of(i),
            visibility=cursor.visibility_of(i),
            active=i == active,
        )
        for i in range(len(sentence))
    ]
