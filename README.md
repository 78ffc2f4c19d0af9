# minishell

A small interactive shell for POSIX systems. It reads a line, splits it into
tokens, expands variables, checks the syntax and runs it. External programs
are found on `PATH` and started as child processes.

## Features

- Pipelines: `ls | grep py | wc -l`
- Redirections: `<`, `>`, `>>`, and heredocs with `<<`. If a command has
  several redirections of one kind, the last one wins.
- Single and double quotes. `$NAME` is expanded except inside single quotes.
- `$?` holds the exit status of the last command.
- Builtins: `echo` (with `-n`, `-nn`, ...), `cd` (with `~` and `-`), `pwd`,
  `env`, `export`, `unset` and `exit`.
- `SHLVL` goes up by one when the shell starts.
- Ctrl+C drops the current line and sets the status to 130.
- Ctrl+\ is ignored.
- Ctrl+D leaves the shell.

## Installation

```
pip install .
```

## Usage

Start the interactive prompt:

```
minishell
```

Example session:

```
MINISHELL❯ export GREETING="hello world"
MINISHELL❯ echo $GREETING | tr a-z A-Z
HELLO WORLD
MINISHELL❯ cat << EOF > notes.txt
heredoc> first line
heredoc> EOF
MINISHELL❯ exit 3
```

When it leaves, the shell exits with the status of the last command. If you
give `exit` a number, it uses that number, taken modulo 256. If the argument
is not a number, the status is 255.

Without arguments, `export` prints the environment sorted by name, as
`NAME="value"`. `env` prints only the variables that have a non-empty value.

Errors are written to standard error in colour, in this form:

```
minishell: <context>: <message>
```

The statuses follow the usual shell conventions: 127 when a command is not
found, 126 when permission is denied, 2 for a parse error and 1 for most
other errors. An unclosed quote is reported as invalid input.

## How commands run

A line that names a builtin and has no pipe or file redirection runs inside
the shell, so `cd`, `export` and `unset` change the session. In a pipeline or
with a redirection, a builtin runs on a copy of the session, so its changes
are lost, the way they would be in a separate process. Inside a pipeline,
`exit` does nothing.

The commands of a pipeline run one after another. The output of each one is
collected and then handed to the next as its input. A heredoc is written to a
temporary file, which is removed once the command has finished.

## What it does not do

- It does not run script files, and it takes no command-line options. It only
  reads lines at its prompt.
- It does not support `;`, `&&`, `||`, subshells, globbing, job control or
  background jobs.
- The stages of a pipeline do not run at the same time, so a stage that never
  ends blocks the rest of the pipeline.

## Using it from Python

The `Shell` class in `minishell.shell` runs lines without the prompt. This is
handy for scripting and for tests:

```python
from minishell.shell import Shell

shell = Shell({"PATH": "/usr/bin:/bin", "HOME": "/tmp"})
shell.run_line("export NAME=value")
status = shell.run_line("echo $NAME")
```

`run_line` returns the status the line leaves. It raises
`minishell.errors.ShellExit` when the line runs `exit`. `Shell.loop()` reads
lines through the `readline` callable that you give it until that callable
returns `None`.

The pieces can also be used on their own:

- `minishell.lexer.tokenize` splits a line into typed tokens.
- `minishell.expansion.expand_variables` expands `$NAME` and `$?`.
- `minishell.validation.check_syntax` raises `ShellError` for misplaced
  pipes and redirections.
- `minishell.environment.Environment` holds ordered `NAME=value` entries.
- `minishell.builtins.run_builtin` runs a builtin against a `ShellState`.

## Running the tests

```
pip install ".[test]"
pytest
```