"""Syntax checks on a token list."""

from __future__ import annotations

from minishell.models import Token, TokenType

_REDIRECTIONS = frozenset(
    {TokenType.REDIR_APPEND, TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.HEREDOC}
)


class ShellSyntaxError(Exception):
    """A command line that cannot be run.

    ``token`` holds the offending token text when there is one.
    """

    def __init__(self, message: str, token: str | None = None) -> None:
        super().__init__(message)
        self.token = token


def _unexpected(text: str) -> ShellSyntaxError:
    return ShellSyntaxError(f"syntax error near unexpected token `{text}'", text)


def is_redirection(token: Token | None) -> bool:
    """Tell whether ``token`` is a redirection operator."""
    return token is not None and token.type in _REDIRECTIONS


def check_quotes(text: str) -> None:
    """Raise ShellSyntaxError if ``text`` has an unclosed quote."""
    in_single = False
    in_double = False
    for char in text:
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
    if in_single or in_double:
        raise ShellSyntaxError("unclosed quotes")


def check_pipes(tokens: list[Token]) -> None:
    """Reject a pipe at either end or two pipes in a row."""
    if not tokens:
        return
    if tokens[0].type is TokenType.PIPE:
        raise _unexpected("|")
    for current, following in zip(tokens, tokens[1:]):
        if current.type is TokenType.PIPE and following.type is TokenType.PIPE:
            raise _unexpected("|")
    if tokens[-1].type is TokenType.PIPE:
        raise _unexpected("|")


def check_redirections(tokens: list[Token]) -> None:
    """Reject a redirection not followed by a word."""
    for index, (current, following) in enumerate(zip(tokens, tokens[1:])):
        if not is_redirection(current):
            continue
        if is_redirection(following):
            raise _unexpected(following.text)
        if following.type is TokenType.PIPE:
            raise _unexpected("|" if index + 2 < len(tokens) else "newline")
    if tokens and is_redirection(tokens[-1]):
        raise _unexpected("newline")


def analyse(tokens: list[Token]) -> list[Token]:
    """Run every syntax check and return the tokens unchanged when they pass."""
    for token in tokens:
        check_quotes(token.text)
    check_pipes(tokens)
    check_redirections(tokens)
    return tokens