"""Core data types shared by the lexer, parser and executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class TokenType(Enum):
    """Kind of a lexical token."""

    WORD = auto()
    PIPE = auto()
    REDIR_IN = auto()
    REDIR_OUT = auto()
    REDIR_APPEND = auto()
    HEREDOC = auto()


@dataclass
class Token:
    """A token produced by the lexer.

    ``quoted`` marks a redirection target (typically a heredoc delimiter)
    that contained quote characters before expansion.
    """

    text: str
    type: TokenType = TokenType.WORD
    quoted: bool = False


class RedirectKind(Enum):
    """Kind of redirection attached to a command."""

    APPEND = auto()
    OUT = auto()
    IN = auto()
    HEREDOC = auto()

    @classmethod
    def from_token_type(cls, token_type: TokenType) -> "RedirectKind":
        """Return the redirection kind for a redirection operator token."""
        try:
            return _TOKEN_TO_REDIRECT[token_type]
        except KeyError:
            raise ValueError(f"{token_type!r} is not a redirection operator") from None


_TOKEN_TO_REDIRECT = {
    TokenType.REDIR_APPEND: RedirectKind.APPEND,
    TokenType.REDIR_OUT: RedirectKind.OUT,
    TokenType.REDIR_IN: RedirectKind.IN,
    TokenType.HEREDOC: RedirectKind.HEREDOC,
}


@dataclass
class Redirection:
    """A redirection of a command.

    ``target`` is the file name, or the delimiter for a heredoc.  Once a
    heredoc has been read its body is kept in ``heredoc``.
    """

    target: str
    kind: RedirectKind
    quoted: bool = False
    heredoc: str | None = None


@dataclass
class Command:
    """One simple command of a pipeline."""

    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)

    @property
    def name(self) -> str | None:
        """The command name, or None when the command has no words."""
        return self.args[0] if self.args else None


@dataclass
class ShellState:
    """Mutable state of a running shell."""

    exit_status: int = 0
    in_heredoc: bool = False
    child_running: bool = False