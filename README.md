# minishell

The pieces of a small POSIX-style shell, in pure Python with no
dependencies. There is a tokenizer, syntax checks, `$NAME` / `$?`
expansion with quote removal, here-documents, the usual builtins, and an
executor. The executor runs builtins in-process and runs external programs
in pipelines with redirections.

## Modules

- `minishell.models` holds the data types: `Token` and `TokenType`,
  `Redirection` and `RedirectKind`, `Command` and `ShellState`.
- `minishell.env` has `Environment`, an ordered set of variables. A
  variable may have no value. The module also has `is_valid_identifier`
  and `join_path`.
- `minishell.lexer` has `tokenize`, which splits a line into words, pipes
  and `<`, `>`, `>>`, `<<` operators. Quotes stay inside the words.
- `minishell.syntax` has `analyse`, `check_quotes`, `check_pipes` and
  `check_redirections`. On bad input they raise `ShellSyntaxError`. That
  covers an unclosed quote, a pipe at either end of the line, two pipes in a
  row, and a redirection not followed by a word.
- `minishell.expander` has `expand_tokens` and `expand_word`. They expand
  variables and remove quotes. Single quotes turn expansion off. A word
  after `<<` is treated as a delimiter: it is unquoted but not expanded, and
  a quoted delimiter is flagged on the token.
- `minishell.heredoc` has three functions:
  - `read_heredoc` reads lines up to the delimiter, with a `> ` prompt and
    a warning at end of input.
  - `expand_line` expands the body lines.
  - `prepare_heredocs` reads every heredoc of a pipeline.
- `minishell.builtins` has `echo` (with `-n`), `cd`, `pwd`, `env`, `export`,
  `unset`, `exit`, `:` and `!`, dispatched by `run_builtin`. `exit` raises
  `ShellExit`, which carries the status.
- `minishell.executor` runs commands. Its public functions are
  `run_commands`, `execute_pipeline`, `execute_builtin`,
  `resolve_executable`, `open_redirection` and `install_signal_handlers`.

## Example

```python
import io
from minishell.env import Environment
from minishell.lexer import tokenize
from minishell.syntax import analyse, ShellSyntaxError
from minishell.expander import expand_tokens
from minishell.builtins import builtin_echo

env = Environment.from_strings(["HOME=/home/user", "PATH=/usr/bin:/bin"])
env.set("GREETING", "hello")
env.to_envp()   # ["HOME=/home/user", "PATH=/usr/bin:/bin", "GREETING=hello"]

tokens = tokenize('echo "$GREETING world" | cat')
analyse(tokens)                          # raises ShellSyntaxError on bad input
expand_tokens(tokens, env, exit_status=0)
[t.text for t in tokens]                 # ["echo", "hello world", "|", "cat"]

out = io.StringIO()
builtin_echo(["echo", "-n", "hi"], out)  # out now holds "hi"
```

Running commands:

```python
from minishell.models import Command, Redirection, RedirectKind, ShellState
from minishell.executor import run_commands

state = ShellState()
commands = [
    Command(["ls"]),
    Command(["wc", "-l"], [Redirection("count.txt", RedirectKind.OUT)]),
]
run_commands(commands, env, state)   # returns the status, also kept in state.exit_status
```

`run_commands` runs a single builtin inside the shell process, so `cd`,
`export` and `unset` change the shell's own state. Anything else goes to
`execute_pipeline`. It reads the heredocs first and starts one child process
for each external command. Builtins inside a pipeline work on a copy of the
environment. The status is that of the last command:

- 127 for "command not found";
- 126 for a directory or a permission error;
- 128 + the signal number for a child killed by a signal.

## What it does not do

The package has no interactive prompt and installs no command. It reads no
lines and keeps no history. It also has no step that turns a token list into
`Command` objects: the caller builds the `Command` and `Redirection` values
passed to the executor.