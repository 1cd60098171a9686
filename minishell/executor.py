"""Running parsed commands: builtins in the shell, programs in pipelines."""

from __future__ import annotations

import io
import os
import signal
import subprocess
import sys
import threading
from collections.abc import Callable, Iterable
from contextlib import ExitStack
from typing import BinaryIO, Union

from minishell.builtins import ShellExit, exec_error_status, is_builtin, run_builtin
from minishell.env import Environment, join_path
from minishell.heredoc import prepare_heredocs
from minishell.models import Command, RedirectKind, Redirection, ShellState

_OUTPUT_KINDS = (RedirectKind.OUT, RedirectKind.APPEND)
_OPEN_FLAGS = {
    RedirectKind.OUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    RedirectKind.APPEND: os.O_WRONLY | os.O_CREAT | os.O_APPEND,
    RedirectKind.IN: os.O_RDONLY,
}
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"

# What a pipeline stage reads from: nothing special, a stream, or literal bytes.
_Input = Union[None, BinaryIO, bytes]


class RedirectionError(Exception):
    """A redirection target could not be opened."""


class CommandNotFound(Exception):
    """No executable could be found for a command name."""


def is_blank(line: str) -> bool:
    """Tell whether ``line`` holds only spaces, tabs and newlines."""
    return all(char in " \t\n" for char in line)


def is_directory(path: str) -> bool:
    """Tell whether ``path`` names an existing directory."""
    return os.path.isdir(path)


def _search_path(name: str, env: Environment) -> str:
    path_value = env.get("PATH")
    if path_value is None:
        raise CommandNotFound(name)
    for directory in filter(None, path_value.split(":")):
        candidate = join_path(directory, name)
        if os.access(candidate, os.X_OK):
            return candidate
    raise CommandNotFound(name)


def resolve_executable(name: str, env: Environment) -> str:
    """Find the file to run for ``name``.

    Absolute paths are used as given, ``./`` and ``../`` are taken from the
    working directory, ``~`` from ``HOME``; other names are searched in
    ``PATH``.  Raises CommandNotFound when nothing fits.
    """
    if not name:
        raise CommandNotFound(name)
    if name.startswith("/"):
        return name
    if name.startswith(("./", "../")):
        try:
            cwd = os.getcwd()
        except OSError:
            raise CommandNotFound(name) from None
        return join_path(cwd, name)
    if name.startswith("~"):
        home = env.get("HOME")
        if home is None:
            raise CommandNotFound(name)
        return join_path(home, name[1:])
    if is_directory(name) and name.endswith("/"):
        return name
    return _search_path(name, env)


def open_redirection(redirection: Redirection) -> BinaryIO:
    """Open the target of a redirection as a binary stream.

    A heredoc yields its body in memory.  Raises RedirectionError when the
    target cannot be opened.
    """
    target = redirection.target
    if redirection.kind is RedirectKind.HEREDOC:
        if redirection.heredoc is None:
            raise RedirectionError(f"{target}: here-document was not read")
        return io.BytesIO(redirection.heredoc.encode(_ENCODING, _ERRORS))
    try:
        fd = os.open(target, _OPEN_FLAGS[redirection.kind], 0o644)
    except OSError as exc:
        if target == "":
            raise RedirectionError(": ambiguous redirect ") from None
        raise RedirectionError(f"{target}: {exc.strerror}") from None
    return os.fdopen(fd, "rb" if redirection.kind is RedirectKind.IN else "wb")


def status_from_returncode(returncode: int) -> int:
    """Turn a child's return code into a shell status (128 + signal if killed)."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def _report(message: str) -> None:
    sys.stderr.write(f"minishell: {message}\n")
    sys.stderr.flush()


def _open_all(
    redirections: Iterable[Redirection], stack: ExitStack
) -> tuple[_Input, BinaryIO | None]:
    """Open every redirection in order; the last input and output win."""
    stdin_source: _Input = None
    stdout_file: BinaryIO | None = None
    for redirection in redirections:
        stream = stack.enter_context(open_redirection(redirection))
        if redirection.kind in _OUTPUT_KINDS:
            stdout_file = stream
        elif isinstance(stream, io.BytesIO):
            stdin_source = stream.getvalue()
        else:
            stdin_source = stream
    return stdin_source, stdout_file


def execute_builtin(command: Command, env: Environment, state: ShellState) -> int:
    """Run a builtin in the shell itself, honouring its redirections."""
    if not command.args or not command.args[0]:
        return 1
    with ExitStack() as stack:
        try:
            _, stdout_file = _open_all(command.redirections, stack)
        except RedirectionError as exc:
            _report(str(exc))
            return 1
        if not is_builtin(command.name):
            return 1
        if stdout_file is None:
            return run_builtin(command.args, env, state)
        buffer = io.StringIO()
        try:
            return run_builtin(command.args, env, state, out=buffer)
        finally:
            stdout_file.write(buffer.getvalue().encode(_ENCODING, _ERRORS))


def _copy_env(env: Environment) -> Environment:
    clone = Environment()
    for key, value in env.items():
        clone.set(key, value)
    return clone


def _child_env(env: Environment) -> dict[str, str]:
    return dict(entry.split("=", 1) for entry in env.to_envp())


def _default_signals() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def _run_isolated_builtin(
    args: list[str], env: Environment, state: ShellState
) -> tuple[int, str]:
    """Run a builtin as a pipeline stage: its changes do not reach the shell."""
    buffer = io.StringIO()
    try:
        cwd: str | None = os.getcwd()
    except OSError:
        cwd = None
    try:
        status = run_builtin(args, _copy_env(env), state, out=buffer)
    except ShellExit as exc:
        status = exc.status
    finally:
        if cwd is not None:
            try:
                os.chdir(cwd)
            except OSError:
                pass
    return status & 0xFF, buffer.getvalue()


def _deliver(output: str, stdout_file: BinaryIO | None, last: bool) -> _Input:
    """Send a builtin's output to its destination; return what the next stage reads."""
    if stdout_file is not None:
        stdout_file.write(output.encode(_ENCODING, _ERRORS))
        return b""
    if last:
        sys.stdout.write(output)
        sys.stdout.flush()
        return None
    return output.encode(_ENCODING, _ERRORS)


def _feed(pipe: BinaryIO, data: bytes) -> None:
    try:
        pipe.write(data)
    except BrokenPipeError:
        pass
    finally:
        try:
            pipe.close()
        except BrokenPipeError:
            pass


def _spawn(
    command: Command,
    env: Environment,
    source: _Input,
    stdout_target: BinaryIO | int | None,
    feeders: list[threading.Thread],
) -> subprocess.Popen | int:
    """Start an external command; return the process or a failure status."""
    name = command.name
    if not name:
        return 1
    try:
        path = resolve_executable(name, env)
    except CommandNotFound:
        _report(f"{name}: command not found")
        return 127
    if is_directory(name):
        _report(f"{name}: Is a directory")
        return 126
    data = source if isinstance(source, bytes) else None
    stdin = subprocess.PIPE if data is not None else source
    sys.stdout.flush()
    try:
        process = subprocess.Popen(
            command.args,
            executable=path,
            stdin=stdin,
            stdout=stdout_target,
            env=_child_env(env),
            preexec_fn=_default_signals,
        )
    except OSError as exc:
        _report(f"{name}: {exc.strerror}")
        return exec_error_status(exc.errno or 0)
    if data is not None:
        feeder = threading.Thread(target=_feed, args=(process.stdin, data), daemon=True)
        feeder.start()
        feeders.append(feeder)
    return process


def _last_status(returncode: int) -> int:
    if returncode == -signal.SIGINT:
        sys.stdout.write("\n")
        sys.stdout.flush()
    elif returncode == -signal.SIGQUIT:
        sys.stdout.write("Quit (core dumped)\n")
        sys.stdout.flush()
    return status_from_returncode(returncode)


def _run_stages(commands: list[Command], env: Environment, state: ShellState) -> int:
    outcomes: list[subprocess.Popen | int] = []
    feeders: list[threading.Thread] = []
    upstream: _Input = None
    last_index = len(commands) - 1
    for index, command in enumerate(commands):
        last = index == last_index
        incoming, upstream = upstream, None
        with ExitStack() as stack:
            if incoming is not None and not isinstance(incoming, bytes):
                stack.callback(incoming.close)
            try:
                redirected_in, redirected_out = _open_all(command.redirections, stack)
            except RedirectionError as exc:
                _report(str(exc))
                outcomes.append(1)
                upstream = b""
                continue
            if is_builtin(command.name):
                status, output = _run_isolated_builtin(command.args, env, state)
                upstream = _deliver(output, redirected_out, last)
                outcomes.append(status)
                continue
            source = redirected_in if redirected_in is not None else incoming
            if redirected_out is not None:
                stdout_target: BinaryIO | int | None = redirected_out
            else:
                stdout_target = None if last else subprocess.PIPE
            outcome = _spawn(command, env, source, stdout_target, feeders)
            outcomes.append(outcome)
            if isinstance(outcome, subprocess.Popen) and stdout_target == subprocess.PIPE:
                upstream = outcome.stdout
            else:
                upstream = b""
    if upstream is not None and not isinstance(upstream, bytes):
        upstream.close()
    status = 0
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, subprocess.Popen):
            code = outcome.wait()
            if index == last_index:
                status = _last_status(code)
        elif index == last_index:
            status = outcome
    for feeder in feeders:
        feeder.join()
    return status


def execute_pipeline(
    commands: Iterable[Command], env: Environment, state: ShellState
) -> int:
    """Run commands connected by pipes and return the last one's status.

    Heredocs are read first.  When the first command has no words nothing is
    run and the status is 0.
    """
    commands = list(commands)
    if not prepare_heredocs(commands, env, state):
        return state.exit_status
    if not commands or not commands[0].args:
        state.exit_status = 0
        return 0
    state.child_running = True
    try:
        status = _run_stages(commands, env, state)
    finally:
        state.child_running = False
    state.exit_status = status
    return status


def run_commands(commands: Iterable[Command], env: Environment, state: ShellState) -> int:
    """Run a parsed command line and record its status in ``state``.

    A lone builtin runs in the shell so its changes persist; anything else
    runs as a pipeline.  ShellExit from ``exit`` propagates.
    """
    commands = list(commands)
    if not commands:
        return state.exit_status
    first = commands[0]
    if len(commands) == 1 and is_builtin(first.name):
        if not prepare_heredocs(commands, env, state):
            return state.exit_status
        state.exit_status = execute_builtin(first, env, state)
        return state.exit_status
    state.child_running = True
    try:
        execute_pipeline(commands, env, state)
    finally:
        state.child_running = False
    return state.exit_status


def install_signal_handlers(state: ShellState) -> Callable[[int, object], None]:
    """Install the interactive SIGINT handler and ignore SIGQUIT.

    SIGINT sets the status to 130.  It interrupts a heredoc or the prompt by
    raising KeyboardInterrupt, and is left to running children otherwise.
    Returns the installed handler.
    """

    def handler(signum: int, frame: object) -> None:
        state.exit_status = 130
        if state.in_heredoc:
            raise KeyboardInterrupt
        if not state.child_running:
            sys.stdout.write("\n")
            sys.stdout.flush()
            raise KeyboardInterrupt

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    return handler