"""Command-line interface for the Czytam reading trainer.

WHY: Teachers preparing a booklet want to check how a syllable string
splits and how the reveal feels before a child sees it, and developers
want to poke the engine without a front end. The CLI exposes the
tokenizer, a terminal rendition of a reading session, and the remote
syllabify function.

HOW: argparse with three subcommands. ``tokenize`` prints the token
sequence and word spans. ``practice`` runs a RevealCursor in a read-eval
loop on stdin: Enter advances, ``b`` retreats, ``q`` quits. ``syllabify``
calls the remote function through CzytamClient via asyncio.run().

RULES:
- Results go to stdout; status and errors go to stderr
- practice renders emphasized syllables upper-case, dimmed syllables
  lower-case, and the active syllable in [brackets]
- --gated runs the discovery policy: the picture reveal is one extra
  step, and the step after it ends the session
- --verbose turns on DEBUG logging
- Exit code 1 on configuration, input, or remote errors
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Callable, List, Optional

from czytam.api.client import CzytamClient, UpstreamServiceError
from czytam.core.cursor import RevealCursor, RevealPolicy, Step, Visibility
from czytam.core.tokenizer import tokenize
from czytam.core.tokens import Boundary
from czytam.sessions.view import render_tokens

_ADVANCE_INPUTS = frozenset({"", " "})
_RETREAT_INPUTS = frozenset({"b", "back"})
_QUIT_INPUTS = frozenset({"q", "quit"})


def _status(msg: str) -> None:
    """Print a status message to stderr.

    RULES:
    - All status messages go to stderr
    - Always flush after writing
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def render_line(cursor: RevealCursor) -> str:
    """Render the sentence as one terminal line."""
    parts: List[str] = []
    for token in render_tokens(cursor):
        if token.visibility is Visibility.SPACE:
            parts.append(" ")
            continue
        text = token.text.upper() if token.visibility is Visibility.EMPHASIZED else token.text.lower()
        parts.append("[{}]".format(text) if token.active else text)
    line = "".join(parts)
    if cursor.policy is RevealPolicy.GATED and cursor.image_revealed:
        line += "   (picture revealed)"
    return line


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_tokenize(args: argparse.Namespace) -> None:
    sentence = tokenize(args.sentence)
    if sentence.is_empty:
        _fail("Nothing to read in {!r}".format(args.sentence))

    for i, token in enumerate(sentence.tokens):
        if isinstance(token, Boundary):
            print("{:>3}  |".format(i))
        else:
            print("{:>3}  {}  (word {})".format(i, token.text, token.word_index))
    spans = ", ".join("({}, {})".format(w.start_index, w.end_index) for w in sentence.words)
    print("words: [{}]".format(spans))


def run_practice(
    text: str,
    policy: RevealPolicy,
    read: Callable[[], str],
    write: Callable[[str], None],
) -> int:
    """Drive one sentence from terminal input; returns the number of steps taken.

    The loop ends on quit, on end of input, or (gated) on the step after
    the picture reveal.
    """
    cursor = RevealCursor(tokenize(text), policy)
    steps = 0
    write(render_line(cursor))
    while True:
        try:
            command = read().strip().lower()
        except EOFError:
            break
        if command in _QUIT_INPUTS:
            break
        if command in _ADVANCE_INPUTS:
            step = cursor.advance()
        elif command in _RETREAT_INPUTS:
            step = cursor.retreat()
        else:
            _status("Enter = next syllable, b = back, q = quit")
            continue

        steps += 1
        if step is Step.NEXT_PAGE:
            write("Done.")
            break
        if step is Step.PREVIOUS_PAGE:
            _status("Already at the start")
        write(render_line(cursor))
    return steps


def _cmd_practice(args: argparse.Namespace) -> None:
    if tokenize(args.sentence).is_empty:
        _fail("Nothing to read in {!r}".format(args.sentence))
    policy = RevealPolicy.GATED if args.gated else RevealPolicy.CONTINUOUS
    _status("Enter = next syllable, b = back, q = quit")
    run_practice(args.sentence, policy, read=input, write=print)


async def _syllabify(text: str) -> str:
    async with CzytamClient() as client:
        return await client.syllabify(text)


def _cmd_syllabify(args: argparse.Namespace) -> None:
    _status("Syllabifying...")
    try:
        result = asyncio.run(_syllabify(args.text))
    except ValueError as e:
        # Remote store not configured
        _fail(str(e))
    except UpstreamServiceError as e:
        _fail(str(e))
    print(result)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without running a command.
    """
    parser = argparse.ArgumentParser(
        prog="czytam",
        description="Syllable-by-syllable reading trainer: inspect and practise "
                    "middle-dot sentences such as 'KO·T PI·JE WO·DĘ'.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    tokenize_parser = subparsers.add_parser(
        "tokenize",
        help="Print the token sequence and word spans of a sentence.",
    )
    tokenize_parser.add_argument("sentence", help="Syllable-annotated sentence.")
    tokenize_parser.set_defaults(func=_cmd_tokenize)

    practice_parser = subparsers.add_parser(
        "practice",
        help="Read a sentence syllable by syllable in the terminal.",
    )
    practice_parser.add_argument("sentence", help="Syllable-annotated sentence.")
    practice_parser.add_argument(
        "--gated",
        action="store_true",
        help="Discovery booklet behaviour: reveal the picture after the sentence.",
    )
    practice_parser.set_defaults(func=_cmd_practice)

    syllabify_parser = subparsers.add_parser(
        "syllabify",
        help="Syllabify plain text with the remote function.",
    )
    syllabify_parser.add_argument("text", help="Plain sentence, e.g. 'Kot pije wodę.'")
    syllabify_parser.set_defaults(func=_cmd_syllabify)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
