import pytest

from minishell.environment import Environment
from minishell.errors import ErrorKind, ShellError
from minishell.lexer import tokenize
from minishell.validation import check_syntax, is_builtin, runs_in_shell


def parse(line):
    return tokenize(line, Environment([]), 0)


@pytest.mark.parametrize(
    "name", ["exit", "cd", "echo", "pwd", "env", "export", "unset"]
)
def test_builtins(name):
    assert is_builtin(name) is True


@pytest.mark.parametrize("name", ["ls", "cat", "", "ECHO"])
def test_not_builtins(name):
    assert is_builtin(name) is False


@pytest.mark.parametrize(
    "line, context",
    [
        ("| ls", "|"),
        ("ls |", "|"),
        ("ls | | wc", "||"),
        ("ls || wc", "||"),
        ("cat <", "newline"),
        ("ls >", "newline"),
        ("cat < | wc", "|"),
        ("echo > >> f", ">>"),
        ("cat << <", "<"),
    ],
)
def test_syntax_errors(line, context):
    with pytest.raises(ShellError) as info:
        check_syntax(parse(line))
    assert info.value.context == context
    assert info.value.kind is ErrorKind.SYNTAX_ERROR
    assert info.value.status == 2


def test_valid_builtin_line_runs_in_shell():
    tokens = parse("export A=1")
    check_syntax(tokens)
    assert runs_in_shell(tokens) is True


def test_quoted_pipe_is_not_a_pipe():
    tokens = parse('echo "|"')
    check_syntax(tokens)
    assert runs_in_shell(tokens) is True


def test_valid_pipeline_runs_outside_shell():
    tokens = parse("cat < in | wc > out")
    check_syntax(tokens)
    assert runs_in_shell(tokens) is False


@pytest.mark.parametrize(
    "line, expected",
    [
        ("cd /tmp", True),
        ("echo hi | wc", False),
        ("echo hi > f", False),
        ("echo hi >> f", False),
        ("pwd < f", False),
        ("ls -l", False),
        ("echo << EOF", True),
        ("ls echo", True),
    ],
)
def test_runs_in_shell(line, expected):
    assert runs_in_shell(parse(line)) is expected