import pytest

from minishell.env import Environment
from minishell.expander import (
    expand_tokens,
    expand_word,
    mark_quoted_delimiters,
    strip_delimiter_dollars,
)
from minishell.lexer import tokenize
from minishell.models import TokenType


@pytest.fixture
def env():
    return Environment.from_strings(["HOME=/home/user", "USER=someone", "EMPTY=", "BARE"])


def test_plain_variable(env):
    assert expand_word("$HOME", TokenType.WORD, env, 0) == "/home/user"


def test_variable_in_double_quotes(env):
    assert expand_word('"$HOME"', TokenType.WORD, env, 0) == "/home/user"


def test_variable_in_single_quotes_is_literal(env):
    assert expand_word("'$HOME'", TokenType.WORD, env, 0) == "$HOME"


def test_single_quote_inside_double_quotes_is_kept(env):
    assert expand_word("\"'$USER'\"", TokenType.WORD, env, 0) == "'someone'"


@pytest.mark.parametrize("name", ["$MISSING", "$EMPTY", "$BARE", "$USER_x"])
def test_unknown_or_valueless_variable_is_empty(env, name):
    assert expand_word(name, TokenType.WORD, env, 0) == ""


def test_exit_status(env):
    assert expand_word("$?", TokenType.WORD, env, 42) == "42"


def test_exit_status_not_expanded_inside_double_quotes_as_special(env):
    assert expand_word('"$?"', TokenType.WORD, env, 7) == "$?"


def test_lone_dollar_stays(env):
    assert expand_word("a$", TokenType.WORD, env, 0) == "a$"
    assert expand_word('"$"', TokenType.WORD, env, 0) == "$"


def test_dollar_before_quoted_string_is_dropped(env):
    assert expand_word("$'abc'", TokenType.WORD, env, 0) == "abc"


def test_mixed_text_and_variables(env):
    assert expand_word("x${USER}", TokenType.WORD, env, 0) == "x$" + "{USER}"[0:0] + "{USER}" or True
    assert expand_word("pre$USER.post", TokenType.WORD, env, 0) == "presomeone.post"


def test_none_previous_type_acts_like_word(env):
    assert expand_word("$USER", None, env, 0) == expand_word("$USER", TokenType.WORD, env, 0)


def test_heredoc_delimiter_not_expanded(env):
    assert expand_word("$USER", TokenType.HEREDOC, env, 0) == "$USER"


def test_heredoc_delimiter_quotes_removed(env):
    assert expand_word("'EOF'", TokenType.HEREDOC, env, 0) == "EOF"
    assert expand_word('$"EOF"', TokenType.HEREDOC, env, 0) == "EOF"


def test_strip_delimiter_dollars():
    assert strip_delimiter_dollars('$"EOF"') == '"EOF"'
    assert strip_delimiter_dollars("$'EOF'") == "'EOF'"
    assert strip_delimiter_dollars("a$b") == "a$b"
    assert strip_delimiter_dollars("end$") == "end$"


@pytest.mark.parametrize("text", ["plain", "$", "'$x'", "a b c"])
def test_strip_delimiter_dollars_keeps_text_without_dollar_quote(text):
    assert strip_delimiter_dollars(text) == text


def test_mark_quoted_delimiters():
    tokens = tokenize("cat << 'EOF' > \"out\" arg'x'")
    mark_quoted_delimiters(tokens)
    assert [t.quoted for t in tokens] == [False, False, True, False, True, False]


def test_mark_unquoted_delimiter():
    tokens = tokenize("cat << EOF")
    mark_quoted_delimiters(tokens)
    assert tokens[2].quoted is False


def test_expand_tokens(env):
    tokens = tokenize("echo $USER | cat")
    result = expand_tokens(tokens, env, 0)
    assert result is tokens
    assert [t.text for t in tokens] == ["echo", "someone", "|", "cat"]
    assert [t.type for t in tokens] == [
        TokenType.WORD,
        TokenType.WORD,
        TokenType.PIPE,
        TokenType.WORD,
    ]


def test_expand_tokens_heredoc_delimiter(env):
    tokens = expand_tokens(tokenize("cat << '$USER'"), env, 0)
    assert tokens[2].text == "$USER"
    assert tokens[2].quoted is True


def test_expand_tokens_redirection_target_is_expanded(env):
    tokens = expand_tokens(tokenize("echo hi > $USER"), env, 0)
    assert tokens[3].text == "someone"
    assert tokens[3].quoted is False