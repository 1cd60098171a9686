"""Reading heredoc bodies and expanding variables in them."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from minishell.env import Environment
from minishell.models import Command, RedirectKind, ShellState

PROMPT = "> "
EOF_WARNING = "\nminishell: warning: here-document delimited by EOF\n"


def _is_name_char(char: str) -> bool:
    return char == "_" or "0" <= char <= "9" or "a" <= char <= "z" or "A" <= char <= "Z"


def _expand_dollar(line: str, pos: int, env: Environment, exit_status: int) -> tuple[str, int]:
    """Expand what follows a ``$``; ``pos`` is just past the ``$``."""
    if pos >= len(line):
        return "$", pos
    char = line[pos]
    if char == "?":
        return str(exit_status), pos + 1
    if _is_name_char(char):
        end = pos
        while end < len(line) and _is_name_char(line[end]):
            end += 1
        value = env.get(line[pos:end])
        return (value if value is not None else ""), end
    return "$", pos


def expand_line(line: str, env: Environment, exit_status: int) -> str:
    """Expand ``$NAME`` and ``$?`` in a heredoc line.

    Quotes have no special meaning here; a ``$`` not followed by a name
    character or ``?`` is kept as is.
    """
    out: list[str] = []
    pos = 0
    while pos < len(line):
        dollar = line.find("$", pos)
        if dollar < 0:
            out.append(line[pos:])
            break
        out.append(line[pos:dollar])
        value, pos = _expand_dollar(line, dollar + 1, env, exit_status)
        out.append(value)
    return "".join(out)


def _is_delimiter(line: str, delimiter: str) -> bool:
    return line.startswith(delimiter) and line[len(delimiter):len(delimiter) + 1] == "\n"


def read_heredoc(
    stream: TextIO | None,
    delimiter: str,
    quoted: bool,
    env: Environment,
    exit_status: int,
    prompt: TextIO | None = None,
    err: TextIO | None = None,
) -> str:
    """Read heredoc lines from ``stream`` up to a line equal to ``delimiter``.

    A ``"> "`` prompt is written to ``prompt`` before each line.  Unless the
    delimiter was quoted, variables in each line are expanded.  Reaching end
    of input first prints a warning to ``err`` and ends the body.
    """
    stream = sys.stdin if stream is None else stream
    prompt = sys.stdout if prompt is None else prompt
    err = sys.stderr if err is None else err
    body: list[str] = []
    while True:
        prompt.write(PROMPT)
        prompt.flush()
        line = stream.readline()
        if not line:
            err.write(EOF_WARNING)
            break
        if _is_delimiter(line, delimiter):
            break
        body.append(line if quoted else expand_line(line, env, exit_status))
    return "".join(body)


def prepare_heredocs(
    commands: Iterable[Command],
    env: Environment,
    state: ShellState,
    stream: TextIO | None = None,
    prompt: TextIO | None = None,
    err: TextIO | None = None,
) -> bool:
    """Read the body of every heredoc of a pipeline, in order.

    Returns False when reading is interrupted; the exit status is then 130.
    """
    state.in_heredoc = True
    try:
        for command in commands:
            for redirection in command.redirections:
                if redirection.kind is not RedirectKind.HEREDOC:
                    continue
                redirection.heredoc = read_heredoc(
                    stream,
                    redirection.target,
                    redirection.quoted,
                    env,
                    state.exit_status,
                    prompt,
                    err,
                )
    except KeyboardInterrupt:
        if err is not None:
            err.write("^C\n")
        state.exit_status = 130
        return False
    finally:
        state.in_heredoc = False
    return True