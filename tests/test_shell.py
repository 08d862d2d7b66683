import io
import os

import pytest

from pyminish.builtins import ShellExit
from pyminish.shell import PROMPT, Shell


def make_shell(environ=None, stdin_text=""):
    out = io.StringIO()
    shell = Shell(environ if environ is not None else {}, io.StringIO(stdin_text), out)
    return shell, out


def test_echo_prints_arguments():
    shell, out = make_shell()
    shell.process_line("echo hello")
    assert out.getvalue() == "hello\n"


def test_variable_expansion():
    shell, out = make_shell({"NAME": "world"})
    shell.process_line("echo $NAME")
    assert out.getvalue() == "world\n"


def test_empty_quoted_word_is_reported():
    shell, out = make_shell()
    shell.process_line('""')
    assert out.getvalue() == "command not found: ''\n"
    assert shell.history == []


def test_unbalanced_quotes_give_error():
    shell, out = make_shell()
    shell.process_line('echo "unclosed')
    assert out.getvalue() == "Error\n"


def test_empty_line_does_nothing():
    shell, out = make_shell()
    status = shell.process_line("   ")
    assert status == 0
    assert out.getvalue() == ""
    assert shell.history == []


def test_history_records_trimmed_lines():
    shell, _ = make_shell()
    shell.process_line("  echo a  ")
    assert shell.history == ["echo a"]


def test_export_and_unset_change_environment():
    shell, _ = make_shell()
    shell.process_line("export FOO=bar")
    assert shell.state.env.get("FOO") == "bar"
    shell.process_line("unset FOO")
    assert shell.state.env.get("FOO") is None


def test_unknown_command_sets_status():
    shell, out = make_shell()
    status = shell.process_line("nonexistent_cmd_xyz")
    assert status == 127
    assert out.getvalue() == "command not found: nonexistent_cmd_xyz\n"


def test_status_is_expanded():
    shell, out = make_shell()
    shell.process_line("nonexistent_cmd_xyz")
    shell.process_line("echo $?")
    assert out.getvalue().splitlines()[-1] == "127"


def test_exit_raises_with_code():
    shell, _ = make_shell()
    with pytest.raises(ShellExit) as info:
        shell.process_line("exit 3")
    assert info.value.code == 3


def test_cd_updates_pwd(tmp_path):
    root_dir = os.path.abspath(os.sep)
    environ = {}
    for var_name in ("PWD", "OLDPWD"):
        environ[var_name] = root_dir
    shell, _ = make_shell(environ)
    start = shell.state.cwd
    shell.process_line(f"cd {tmp_path}")
    assert shell.state.cwd == os.path.realpath(tmp_path)
    assert shell.state.env.get("PWD") == os.path.realpath(tmp_path)
    assert shell.state.env.get("OLDPWD") == start


def test_pipeline_through_cat():
    shell, out = make_shell({"PATH": os.environ.get("PATH", "")})
    shell.process_line("echo abc | cat")
    assert out.getvalue() == "abc\n"
    assert shell.status == 0


def test_unfinished_pipe_at_eof_exits():
    shell, out = make_shell()
    with pytest.raises(ShellExit) as info:
        shell.process_line("echo a |")
    assert info.value.code == 2
    assert out.getvalue().endswith("exit\n")


def test_run_until_exit():
    shell, out = make_shell(stdin_text="echo hi\nexit 5\n")
    code = shell.run()
    assert code == 5
    assert "hi\n" in out.getvalue()
    assert out.getvalue().startswith(PROMPT)


def test_run_at_eof_prints_exit():
    shell, out = make_shell(stdin_text="")
    assert shell.run() == 0
    assert out.getvalue() == PROMPT + "exit\n"


class _InterruptingInput(io.StringIO):
    def __init__(self, text):
        super().__init__(text)
        self._interrupted = False

    def readline(self, *args):
        if not self._interrupted:
            self._interrupted = True
            raise KeyboardInterrupt
        return super().readline(*args)


def test_interrupt_sets_status():
    out = io.StringIO()
    shell = Shell({}, _InterruptingInput("echo $?\n"), out)
    assert shell.run() == 0
    assert "130\n" in out.getvalue()