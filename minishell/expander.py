"""Variable expansion and quote removal on tokens."""

from __future__ import annotations

from minishell.env import Environment
from minishell.models import Token, TokenType
from minishell.syntax import is_redirection

_QUOTES = ("'", '"')


def _is_name_char(char: str) -> bool:
    return char == "_" or "0" <= char <= "9" or "a" <= char <= "z" or "A" <= char <= "Z"


def _lookup(env: Environment, name: str) -> str:
    value = env.get(name)
    return value if value is not None else ""


def strip_delimiter_dollars(text: str) -> str:
    """Drop a ``$`` that stands outside quotes right before a quote.

    Used on heredoc delimiters, so that ``$"EOF"`` means ``"EOF"``.
    """
    out: list[str] = []
    in_single = False
    in_double = False
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char == "'":
            in_single = not in_single
        if char == '"':
            in_double = not in_double
        if (
            char == "$"
            and not in_double
            and not in_single
            and pos + 1 < len(text)
            and text[pos + 1] in _QUOTES
        ):
            pos += 1
        out.append(text[pos])
        pos += 1
    return "".join(out)


def mark_quoted_delimiters(tokens: list[Token]) -> None:
    """Flag every redirection target that contains a quote character."""
    previous: Token | None = None
    for token in tokens:
        token.quoted = is_redirection(previous) and any(q in token.text for q in _QUOTES)
        previous = token


def _expand_dollar(
    text: str, pos: int, in_double: bool, env: Environment, exit_status: int
) -> tuple[str, int]:
    """Expand what follows a ``$`` at ``pos``; return the value and the next position."""
    end = pos
    while end < len(text) and _is_name_char(text[end]):
        end += 1
    if end > pos:
        return _lookup(env, text[pos:end]), end
    if pos < len(text) and not in_double:
        char = text[pos]
        value = str(exit_status) if char == "?" else _lookup(env, char)
        return value, pos + 1
    return "$", pos


def expand_word(
    text: str, previous_type: TokenType | None, env: Environment, exit_status: int
) -> str:
    """Expand variables and remove quotes in one token.

    After a heredoc operator the word is a delimiter: it is not expanded,
    only unquoted.
    """
    heredoc = previous_type is TokenType.HEREDOC
    if heredoc:
        text = strip_delimiter_dollars(text)
    out: list[str] = []
    in_single = False
    in_double = False
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        elif char == "$" and not in_single and not heredoc:
            value, pos = _expand_dollar(text, pos + 1, in_double, env, exit_status)
            out.append(value)
            continue
        else:
            out.append(char)
        pos += 1
    return "".join(out)


def expand_tokens(tokens: list[Token], env: Environment, exit_status: int) -> list[Token]:
    """Expand every token in place and return the same list."""
    mark_quoted_delimiters(tokens)
    previous_type = TokenType.WORD
    for token in tokens:
        token.text = expand_word(token.text, previous_type, env, exit_status)
        previous_type = token.type
    return tokens