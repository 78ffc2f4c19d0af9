import io
import os

from minishell.builtins import ShellState
from minishell.environment import Environment, init_environment
from minishell.execution import HEREDOC_PROMPT, execute_pipeline, read_heredoc
from minishell.lexer import tokenize


def make_state():
    return ShellState(env=init_environment(dict(os.environ)))


def feeder(lines, prompts=None):
    feed = iter(lines)

    def readline(prompt):
        if prompts is not None:
            prompts.append(prompt)
        return next(feed, None)

    return readline


def run(state, line, lines=(), err=None):
    tokens = tokenize(line, state.env, state.last_status)
    return execute_pipeline(state, tokens, feeder(lines), err)


def test_read_heredoc_stops_at_delimiter_and_expands(tmp_path):
    state = make_state()
    state.env.set("WHO", "world")
    prompts = []
    path = read_heredoc(state, "EOF", feeder(["hello $WHO", "EOF", "after"], prompts))
    try:
        with open(path, encoding="utf-8") as handle:
            assert handle.read() == "hello world\n"
        assert prompts == [HEREDOC_PROMPT, HEREDOC_PROMPT]
        assert HEREDOC_PROMPT == "heredoc> "
    finally:
        os.unlink(path)


def test_read_heredoc_ends_at_end_of_input():
    state = make_state()
    state.last_status = 5
    path = read_heredoc(state, "STOP", feeder(["code $?", "plain"]))
    try:
        with open(path, encoding="utf-8") as handle:
            assert handle.read() == "code 5\nplain\n"
    finally:
        os.unlink(path)


def test_builtin_output_redirected_to_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    assert run(state, "echo hi there > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "hi there\n"


def test_append_redirection_keeps_content(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "log.txt").write_text("first\n")
    state = make_state()
    assert run(state, "echo second >> log.txt") == 0
    assert (tmp_path / "log.txt").read_text() == "first\nsecond\n"


def test_external_pipeline(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    assert run(state, "printf abc | tr a-c x-z > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "xyz"


def test_builtin_feeds_external(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    assert run(state, "echo piped | cat > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "piped\n"


def test_input_redirection(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in.txt").write_text("from file\n")
    state = make_state()
    assert run(state, "cat < in.txt > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "from file\n"


def test_heredoc_feeds_command(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    assert run(state, "cat << END > out.txt", lines=["line one", "END"]) == 0
    assert (tmp_path / "out.txt").read_text() == "line one\n"


def test_command_not_found():
    state = make_state()
    err = io.StringIO()
    assert run(state, "no_such_command_here", err=err) == 127
    assert "no_such_command_here: " in err.getvalue()
    assert "Command not found" in err.getvalue()


def test_missing_input_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    err = io.StringIO()
    assert run(state, "cat < missing.txt", err=err) == 1
    assert "No such file or directory" in err.getvalue()


def test_lone_redirection_creates_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "made.txt").write_text("old")
    state = make_state()
    state.last_status = 4
    assert run(state, "> made.txt") == 4
    assert (tmp_path / "made.txt").read_text() == ""


def test_exit_status_of_external():
    state = make_state()
    assert run(state, "sh -c 'exit 3'") == 3


def test_builtins_in_pipeline_leave_state_alone(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    before_pwd = state.env.get("PWD")
    run(state, "cd / | cat > out.txt")
    run(state, "export PIPED=yes | cat > out.txt")
    assert os.getcwd() == str(tmp_path)
    assert state.env.get("PWD") == before_pwd
    assert state.env.get("PIPED") is None


def test_missing_path_reports_and_fails():
    state = ShellState(env=Environment(["HOME=/tmp"]))
    err = io.StringIO()
    assert run(state, "ls", err=err) == 127
    assert "PATH: " in err.getvalue()
    assert "Environment variable not found" in err.getvalue()


def test_empty_first_token_does_nothing():
    state = ShellState(env=Environment(["PATH=/usr/bin:/bin"]))
    state.last_status = 9
    assert run(state, "$NOT_SET_AT_ALL ls") == 9