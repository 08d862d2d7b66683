import pytest

from pyminish.environment import Environment
from pyminish.expand import PIPE_MARK, expand_variables, remove_quotes
from pyminish.text import DQ_MARK, SQ_MARK

HOME = "/home/user"


@pytest.fixture
def env():
    return Environment([f"HOME={HOME}", "Q=it's", "P=a|b"])


def test_expands_plain_variable(env):
    assert expand_variables("echo $HOME", env, 0) == "echo " + HOME


def test_expands_status(env):
    assert expand_variables("$?", env, 7) == str(7)
    assert expand_variables("x$?y", env, 42) == "x" + str(42) + "y"


def test_single_quotes_block_expansion(env):
    line = "echo '$HOME'"
    assert expand_variables(line, env, 0) == line


def test_double_quotes_allow_expansion(env):
    assert expand_variables('"$HOME"', env, 0) == '"' + HOME + '"'


def test_unknown_variable_vanishes(env):
    assert expand_variables("a$NOPE b", env, 0) == "a b"


@pytest.mark.parametrize("line", ["cost $", "a $ b", "$-x", "plain text"])
def test_dollar_without_name_is_kept(env, line):
    assert expand_variables(line, env, 0) == line


def test_dollar_before_quote_is_dropped(env):
    assert expand_variables('$"x"', env, 0) == '"x"'


def test_value_with_pipe_is_protected(env):
    expanded = expand_variables("$P", env, 0)
    assert "|" not in expanded
    assert PIPE_MARK in expanded
    assert remove_quotes(expanded) == "a|b"


def test_value_with_quote_survives_quote_removal(env):
    assert remove_quotes(expand_variables("$Q", env, 0)) == "it's"


def test_expansion_does_not_change_environment(env):
    expand_variables("$Q $P", env, 0)
    assert env.get("Q") == "it's"
    assert env.get("P") == "a|b"


def test_remove_quotes_basic():
    assert remove_quotes('"a b"') == "a b"
    assert remove_quotes("'it\"s'") == 'it"s'


def test_remove_quotes_restores_markers():
    assert remove_quotes(DQ_MARK * 2) == '""'
    assert remove_quotes(SQ_MARK * 2) == "''"


@pytest.mark.parametrize("text", ["", "echo hello", "a/b-c"])
def test_remove_quotes_without_quotes_is_identity(text):
    assert remove_quotes(text) == text