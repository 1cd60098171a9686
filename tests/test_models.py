import pytest

from minishell.models import (
    Command,
    RedirectKind,
    Redirection,
    ShellState,
    Token,
    TokenType,
)


@pytest.mark.parametrize(
    "token_type, kind",
    [
        (TokenType.REDIR_APPEND, RedirectKind.APPEND),
        (TokenType.REDIR_OUT, RedirectKind.OUT),
        (TokenType.REDIR_IN, RedirectKind.IN),
        (TokenType.HEREDOC, RedirectKind.HEREDOC),
    ],
)
def test_from_token_type_maps_operators(token_type, kind):
    assert RedirectKind.from_token_type(token_type) is kind


@pytest.mark.parametrize("token_type", [TokenType.WORD, TokenType.PIPE])
def test_from_token_type_rejects_non_redirections(token_type):
    with pytest.raises(ValueError):
        RedirectKind.from_token_type(token_type)


def test_command_name_is_first_argument():
    cmd = Command(args=["echo", "hi"])
    assert cmd.name == "echo"


def test_command_name_empty_is_none():
    assert Command().name is None


def test_command_lists_are_independent():
    a = Command()
    b = Command()
    a.args.append("ls")
    a.redirections.append(Redirection("out", RedirectKind.OUT))
    assert b.args == []
    assert b.redirections == []


def test_token_defaults():
    tok = Token("ls")
    assert tok.type is TokenType.WORD
    assert tok.quoted is False


def test_redirection_heredoc_body_starts_empty():
    redir = Redirection("EOF", RedirectKind.HEREDOC, quoted=True)
    assert redir.heredoc is None
    assert redir.quoted is True


def test_shell_state_is_mutable():
    state = ShellState()
    assert state.exit_status == 0
    state.exit_status = 127
    state.child_running = True
    assert (state.exit_status, state.child_running, state.in_heredoc) == (127, True, False)