"""Interactive REPL for Avii, powered by prompt_toolkit."""

from __future__ import annotations

import logging
import re
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .config import configure_logging, debug_py_trace_enabled, set_debug_py_trace
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_tokens
from .repl_highlight import AviiLexer
from .runner import report_error, repl_eval
from .runtime import AviiRuntimeError, AvNull, Environment, init_stdlib
from .token_types import TT
from .tree import pretty
from .utils import stringify

logger = logging.getLogger(__name__)

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/ast": ("Print the parse tree of the given code", "<code>"),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

_DEPTH_OPEN = {TT.LPAR, TT.LSQB, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAR, TT.RSQB, TT.RBRACE}


def needs_continuation(text: str) -> bool:
    """True while `text` has an open bracket or an unterminated string."""
    try:
        tokens = tokenize(text)
    except LexError as exc:
        return exc.message == "Unterminated string"

    depth = 0
    for tok in tokens:
        if tok.type in _DEPTH_OPEN:
            depth += 1
        elif tok.type in _DEPTH_CLOSE:
            depth = max(depth - 1, 0)

    return depth > 0


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(cmd, start_position=-len(text), display_meta=desc)


def handle_slash(line: str, env_box: list[Environment]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            set_debug_py_trace(True)
        elif arg.lower() in ("off", "0", "false", "no"):
            set_debug_py_trace(False)
        elif arg == "":
            set_debug_py_trace(not debug_py_trace_enabled())
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        env_box[0] = Environment.global_scope()
        print("Environment reset.")
        return True

    if cmd == "/ast":
        if not arg:
            print("Usage: /ast <code>", file=sys.stderr)
            return True
        try:
            print(pretty(parse_tokens(tokenize(arg))))
        except (LexError, ParseError) as exc:
            report_error(exc)
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def eval_submission(text: str, env_box: list[Environment]) -> None:
    """Run one submission, printing its value or the error; the session survives errors."""
    text = _normalize(text)
    if not text.strip():
        return

    if handle_slash(text, env_box):
        return

    try:
        result = repl_eval(text, env_box[0])
    except (ParseError, LexError, AviiRuntimeError, RecursionError) as exc:
        logger.debug("submission failed", exc_info=True)
        report_error(exc)
        return

    if not isinstance(result, AvNull):
        print(stringify(result))


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    configure_logging()
    init_stdlib()
    # Mutable box so /reset can swap the scope.
    env_box: list[Environment] = [Environment.global_scope()]

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        if buf.text.startswith("/") or not needs_continuation(buf.text):
            buf.validate_and_handle()
            return

        buf.insert_text("\n")

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=AviiLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("avii repl, Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        eval_submission(text, env_box)


if __name__ == "__main__":
    repl()
