"""czytam: progressive syllable-reveal engine for early-reading practice.

WHY: A child learning to read follows a sentence syllable by syllable
while a caregiver taps along. The highlight must always sit on the
syllable being read, and a reward picture should only appear once the
sentence is finished. This package holds that engine plus the thin
layers that feed it (remote store client, practice sessions, HTTP API).

HOW: Three-stage flow. Resolve a syllable-annotated sentence (stored or
via the syllabify function), tokenize it into a flat token sequence, and
drive a RevealCursor over the tokens from user input. Sessions glue the
cursor to card, booklet, and discovery-booklet modes.

RULES:
- The tokenizer and cursor never raise for well-typed input
- A fresh cursor is built for every sentence; cursors are never reused
- Sessions differ only in policy glue, never in the engine
"""

__version__ = "0.1.0"
