"""Commands the shell runs itself, without starting a new program."""

from __future__ import annotations

import errno
import os
import sys
from typing import TextIO

from minishell.env import Environment, is_valid_identifier
from minishell.models import ShellState

_BUILTINS = frozenset({"cd", "echo", "env", "exit", "export", "pwd", "unset", ":", "!"})
_LONG_MAX = 2**63 - 1
_LONG_MIN_MAGNITUDE = 2**63


class ShellExit(Exception):
    """Raised when the shell has to terminate with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def _stdout(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _stderr(err: TextIO | None) -> TextIO:
    return sys.stderr if err is None else err


def is_builtin(name: str | None) -> bool:
    """Tell whether ``name`` is run by the shell itself."""
    return name in _BUILTINS


def exec_error_status(err: int) -> int:
    """Map an errno from a failed program start to the shell's exit status."""
    if err in (errno.EACCES, errno.ENOEXEC, errno.ETXTBSY):
        return 126
    if err in (errno.ENOENT, errno.ENOTDIR):
        return 127
    return 1


def parse_exit_status(text: str) -> int:
    """Turn an ``exit`` argument into a status between 0 and 255.

    The argument must be an optionally signed decimal number that fits in a
    64-bit signed integer; otherwise ValueError is raised.
    """
    sign = 1
    digits = text
    if digits[:1] in ("+", "-"):
        sign = -1 if digits[0] == "-" else 1
        digits = digits[1:]
    if not digits or not all("0" <= c <= "9" for c in digits):
        raise ValueError(f"{text}: numeric argument required")
    value = int(digits)
    limit = _LONG_MAX if sign == 1 else _LONG_MIN_MAGNITUDE
    if value > limit:
        raise ValueError(f"{text}: numeric argument required")
    return (sign * value) % 256


def _is_n_flag(word: str) -> bool:
    return word.startswith("-") and all(c == "n" for c in word[1:])


def builtin_echo(args: list[str], out: TextIO | None = None) -> int:
    """Print the arguments; leading ``-n`` flags suppress the newline."""
    out = _stdout(out)
    words = args[1:]
    newline = True
    while words and _is_n_flag(words[0]):
        newline = False
        words = words[1:]
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def builtin_cd(args: list[str], env: Environment, err: TextIO | None = None) -> int:
    """Change the working directory and update ``PWD`` and ``OLDPWD``."""
    err = _stderr(err)
    if len(env) == 0:
        return -1
    if len(args) > 2:
        err.write("minishell: cd: too many arguments\n")
        return 1
    try:
        oldpwd: str | None = os.getcwd()
    except OSError:
        oldpwd = None
    if len(args) < 2 or args[1] == "~":
        target = env.get("HOME")
    else:
        target = args[1]
    if target is None:
        err.write("minishell: cd: HOME not set\n")
        return 1
    try:
        os.chdir(target)
    except OSError as exc:
        err.write(f"minishell: cd: {args[1] if len(args) > 1 else target}: {exc.strerror}\n")
        return 1
    try:
        pwd: str | None = os.getcwd()
    except OSError:
        pwd = None
    if oldpwd is not None:
        env.update("OLDPWD", oldpwd)
    if pwd is not None:
        env.update("PWD", pwd)
    return 0


def builtin_pwd(out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print the working directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        _stderr(err).write(f"pwd: {exc.strerror}\n")
        return 1
    _stdout(out).write(f"{cwd}\n")
    return 0


def builtin_env(env: Environment, out: TextIO | None = None) -> int:
    """Print every variable that has a value."""
    out = _stdout(out)
    for key, value in env.items():
        if value is not None:
            out.write(f"{key}={value}\n")
    return 0


def export_argument(env: Environment, arg: str, err: TextIO | None = None) -> int:
    """Apply one ``export`` argument: ``NAME`` or ``NAME=VALUE``."""
    if not arg or not is_valid_identifier(arg):
        _stderr(err).write(f"minishell: export: `{arg}`: not a valid identifier\n")
        return 1
    key, sep, value = arg.partition("=")
    if not sep:
        if key not in env:
            env.add(arg)
        return 0
    env.set(key, value)
    return 0


def builtin_export(
    args: list[str], env: Environment, out: TextIO | None = None, err: TextIO | None = None
) -> int:
    """Export variables, or list them sorted when no argument is given."""
    words = [word for word in args[1:] if word]
    if not words:
        out = _stdout(out)
        env.sort()
        for key, value in env.items():
            out.write(f'declare -x {key}="{value if value is not None else ""}"\n')
        return 0
    status = 0
    for word in words:
        result = export_argument(env, word, err)
        if result:
            status = result
    return status


def builtin_unset(args: list[str], env: Environment, err: TextIO | None = None) -> int:
    """Remove variables; stop at the first invalid name."""
    if len(env) == 0:
        return 1
    for name in args[1:]:
        if not is_valid_identifier(name):
            _stderr(err).write(f"bash: unset `{name}': not a valid identifier\n")
            return 1
        env.remove(name)
    return 0


def builtin_exit(
    args: list[str], state: ShellState, out: TextIO | None = None, err: TextIO | None = None
) -> int:
    """Leave the shell by raising ShellExit.

    With too many arguments nothing happens and 1 is returned.
    """
    err = _stderr(err)
    status = 0
    if len(args) > 1:
        try:
            status = parse_exit_status(args[1])
        except ValueError:
            err.write("exit\n")
            err.write(f"minishell: exit: {args[1]}: numeric argument required\n")
            raise ShellExit(2) from None
    if len(args) > 2:
        err.write("exit\nminishell: exit: too many arguments\n")
        return 1
    if not state.child_running:
        _stdout(out).write("exit\n")
    raise ShellExit(status)


def run_builtin(
    args: list[str],
    env: Environment,
    state: ShellState,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run the builtin named by ``args[0]`` and return its status."""
    name = args[0] if args else None
    if name == "env":
        return builtin_env(env, out)
    if name == "cd":
        return builtin_cd(args, env, err)
    if name == "pwd":
        return builtin_pwd(out, err)
    if name == "exit":
        return builtin_exit(args, state, out, err)
    if name == "echo":
        return builtin_echo(args, out)
    if name == "export":
        return builtin_export(args, env, out, err)
    if name == "unset":
        return builtin_unset(args, env, err)
    if name in (":", "!"):
        return 0
    return 1