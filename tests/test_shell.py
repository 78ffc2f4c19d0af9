import io
import os
import signal

import pytest

from minishell import shell as shell_module
from minishell.errors import ShellExit
from minishell.shell import INTERRUPTED_STATUS, PROMPT, Shell, main


def scripted(lines, prompts=None):
    feed = iter(lines)

    def readline(prompt):
        if prompts is not None:
            prompts.append(prompt)
        item = next(feed, None)
        if isinstance(item, BaseException):
            raise item
        return item

    return readline


def make_shell(lines=(), environ=None, prompts=None):
    env = dict(os.environ) if environ is None else environ
    return Shell(environ=env, readline=scripted(lines, prompts), err=io.StringIO())


def test_shlvl_is_raised():
    sh = make_shell(environ={"SHLVL": "2", "PATH": "/bin"})
    assert sh.state.env.get("SHLVL") == "3"


def test_echo_runs_in_shell(capsys):
    sh = make_shell()
    assert sh.run_line("echo hello world") == 0
    assert capsys.readouterr().out == "hello world\n"


def test_export_persists_and_expands(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    sh = make_shell()
    sh.run_line("export FOO=bar")
    assert sh.state.env.get("FOO") == "bar"
    sh.run_line("echo $FOO > out.txt")
    assert (tmp_path / "out.txt").read_text() == "bar\n"


def test_cd_changes_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "sub"
    target.mkdir()
    sh = make_shell()
    sh.run_line("cd sub")
    assert os.getcwd() == str(target)
    assert sh.state.env.get("PWD") == str(target)


def test_syntax_error():
    sh = make_shell()
    assert sh.run_line("| ls") == 2
    assert "Parse error" in sh.err.getvalue()


def test_unclosed_quote():
    sh = make_shell()
    assert sh.run_line("echo 'open") == 1
    assert "Invalid input" in sh.err.getvalue()


def test_empty_line_keeps_status():
    sh = make_shell()
    sh.state.last_status = 7
    assert sh.run_line("") == 7
    assert sh.run_line("   ") == 7


def test_last_status_expands(capsys):
    sh = make_shell()
    sh.run_line("no_such_command_here")
    sh.run_line("echo $?")
    assert capsys.readouterr().out == "127\n"


def test_exit_raises_with_status():
    sh = make_shell()
    with pytest.raises(ShellExit) as caught:
        sh.run_line("exit 42")
    assert caught.value.status == 42


def test_loop_returns_exit_status(capsys):
    sh = make_shell(["echo a", "exit 7", "echo never"])
    assert sh.loop() == 7
    assert capsys.readouterr().out == "a\n"


def test_loop_returns_last_status_at_end_of_input():
    sh = make_shell(["no_such_command_here", None])
    assert sh.loop() == 127


def test_interrupt_sets_status():
    sh = make_shell([KeyboardInterrupt(), None])
    assert sh.loop() == INTERRUPTED_STATUS
    assert INTERRUPTED_STATUS == 130


def test_loop_shows_prompt():
    prompts = []
    sh = make_shell(["", None], prompts=prompts)
    assert sh.loop() == 0
    assert prompts == [PROMPT, PROMPT]
    assert "MINISHELL❯ " in prompts[0]


def test_main_ends_at_end_of_input(monkeypatch):
    calls = []
    monkeypatch.setattr(signal, "signal", lambda sig, handler: calls.append((sig, handler)))

    def no_input(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", no_input)
    assert main() == 0
    assert all(handler is signal.SIG_IGN for _, handler in calls)
    assert shell_module.Shell is Shell