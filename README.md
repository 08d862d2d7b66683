# pyminish

A small interactive command shell. It reads command lines at a
`minishell% ` prompt and runs them, supporting:

- pipelines joined with `|`, with a continuation prompt (`> `) when a line
  ends in a pipe
- redirections `<`, `>`, `>>` and here-documents `<<` (read at a
  `heredoc> ` prompt, with `$NAME` expansion)
- single and double quotes, and `$NAME` / `$?` expansion
- the built-in commands `echo` (with `-n`), `cd`, `pwd`, `env`, `export`,
  `unset` and `exit`
- external programs looked up through `PATH`

## Installing

```
pip install .
```

## Running

```
pyminish
```

Type commands as in a usual shell:

```
minishell% export GREETING=hello
minishell% echo $GREETING world | cat > out.txt
minishell% cat < out.txt
hello world
minishell% exit
```

End of input (Ctrl-D) at the prompt prints `exit` and leaves the shell with
status 0. Ctrl-C at the prompt starts a fresh line and sets `$?` to 130.
`exit N` leaves with status `N` (modulo 256).

## Using it from Python

The `Shell` class in `pyminish.shell` runs lines one at a time. It takes an
environment (a mapping or a list of `NAME=value` strings) and optional input
and output streams:

```python
import io
from pyminish.shell import Shell

out = io.StringIO()
shell = Shell({"PATH": "/usr/bin:/bin", "HOME": "/tmp"}, stdout=out)
shell.process_line("export NAME=value")
shell.process_line("echo $NAME")
print(out.getvalue())   # value
print(shell.status)     # 0
```

`process_line` returns the new status and raises
`pyminish.builtins.ShellExit` (with a `code` attribute) when the line ends the
shell. `Shell.run()` loops over the input stream until end of input or `exit`
and returns the exit code. Lines that were run are kept in `Shell.history`.

The lower-level helpers are also available, for example
`pyminish.expand.expand_variables` and `pyminish.expand.remove_quotes`,
`pyminish.syntax.is_well_formed`, `pyminish.executor.dispatch` and
`pyminish.executor.run_command`, and the `Environment` class in
`pyminish.environment`.

## What it does not do

- Stages of a pipeline run one after another, not at the same time: each
  stage's output is collected in memory and fed to the next. A pipeline
  always leaves `$?` at 0.
- Each stage of a pipeline, and each command with redirections, works on its
  own copy of the environment, so `export`, `unset` and `cd` there do not
  change the shell.
- `cd` with no argument does not go to `$HOME`; it reports `cd: HOME not set`.
- There is no `;`, `&&`, `||`, background jobs, globbing or history file;
  history is kept in memory only for the session.

## Running the tests

```
pip install .[test]
pytest
```