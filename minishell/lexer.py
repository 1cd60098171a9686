"""Splitting a command line into tokens."""

from __future__ import annotations

from minishell.models import Token, TokenType

_OPERATORS = ("", "|", "<", ">")
_BLANKS = (" ", "\t", "\n")
_WORD_BREAKS = " \t\n\v\f\r"

_REDIRECT_TYPES = {
    ("<", False): TokenType.REDIR_IN,
    ("<", True): TokenType.HEREDOC,
    (">", False): TokenType.REDIR_OUT,
    (">", True): TokenType.REDIR_APPEND,
}


def is_operator(char: str) -> bool:
    """Tell whether ``char`` ends a word: a pipe, a redirection sign or end of input."""
    return char in _OPERATORS


def is_space(char: str) -> bool:
    """Tell whether ``char`` is a blank separating tokens."""
    return char in _BLANKS


def _read_word(line: str, start: int) -> tuple[str, int]:
    """Read a word starting at ``start``; quoted blanks and operators stay in it."""
    in_single = False
    in_double = False
    for pos in range(start, len(line)):
        char = line[pos]
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
        elif not in_single and not in_double and (char in _WORD_BREAKS or is_operator(char)):
            return line[start:pos], pos
    return line[start:], len(line)


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into words, pipes and redirection operators.

    Quotes are kept in the words; they are removed later by the expander.
    An empty line yields a single empty word.
    """
    if not line:
        return [Token("")]
    tokens: list[Token] = []
    pos = 0
    length = len(line)
    while pos < length:
        while pos < length and line[pos] in _WORD_BREAKS:
            pos += 1
        if pos >= length:
            break
        char = line[pos]
        if char == "|":
            tokens.append(Token("|", TokenType.PIPE))
            pos += 1
        elif char in "<>":
            doubled = line.startswith(char * 2, pos)
            text = char * 2 if doubled else char
            tokens.append(Token(text, _REDIRECT_TYPES[(char, doubled)]))
            pos += len(text)
        else:
            word, pos = _read_word(line, pos)
            tokens.append(Token(word))
    return tokens