import pytest

from pyminish.environment import (
    Environment,
    check_identifier,
    export_arguments,
    get_name,
    join_entry,
)


@pytest.fixture
def env():
    return Environment(["HOME=/home/user", "PATH=/bin:/usr/bin", "PWD=/"])


def test_get_returns_value(env):
    assert env.get("HOME") == "/home/user"
    assert env.get("PATH") == "/bin:/usr/bin"


def test_get_requires_full_name(env):
    assert env.get("HOM") is None
    assert env.get("MISSING") is None


def test_mapping_constructor():
    env = Environment({"HOME": "/root"})
    assert env.get("HOME") == "/root"
    assert len(env) == 1


def test_set_entry_replaces_whole_entry(env):
    env.set_entry("PWD=", "PWD=/tmp")
    assert env.get("PWD") == "/tmp"


def test_set_entry_missing_prefix_changes_nothing(env):
    before = list(env)
    env.set_entry("OLDPWD=", "OLDPWD=/x")
    assert list(env) == before


def test_get_name():
    assert get_name("A=b") == "A="
    assert get_name("ABC") == "ABC"
    assert get_name("") is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("A=1", True),
        ("A_B=x y", True),
        ("ABC", True),
        ("1A", False),
        ("_A", False),
        ("A-B", False),
        ("", False),
    ],
)
def test_check_identifier(text, expected):
    assert check_identifier(text) is expected


def test_join_entry():
    assert join_entry("A", None) == "A"
    assert join_entry("A=", None) == 'A=""'
    assert join_entry("A=", "1") == "A=1"
    assert join_entry(None, "1") is None


def test_export_adds_new_variable(env):
    env.export("NEW=", "value")
    assert env.get("NEW") == "value"
    assert list(env)[-1] == "NEW=value"


def test_export_replaces_existing(env):
    count = len(env)
    env.export("HOME=", "/srv")
    assert env.get("HOME") == "/srv"
    assert len(env) == count


def test_export_bare_name_keeps_value(env):
    env.export("HOME", None)
    assert env.get("HOME") == "/home/user"


def test_export_name_with_equals_sets_empty_quotes(env):
    env.export("HOME=", None)
    assert env.get("HOME") == '""'


def test_replace_missing_returns_false(env):
    assert env.replace("NOPE=", "1") is False
    assert env.get("NOPE") is None


def test_unset_removes_variable(env):
    assert env.unset(["HOME"]) is True
    assert env.get("HOME") is None
    assert env.get("PATH") == "/bin:/usr/bin"


def test_unset_does_not_remove_longer_names():
    env = Environment(["AB=1", "A=2"])
    env.unset(["A"])
    assert list(env) == ["AB=1"]


def test_unset_stops_on_name_with_equals(env):
    assert env.unset(["HOME=x", "PATH"]) is False
    assert env.get("PATH") == "/bin:/usr/bin"


def test_env_lines_filters_entries():
    env = Environment(["A=1", "B", "C=''", "D=x"])
    assert env.env_lines() == ["A=1", "D=x"]


def test_export_lines_sorted_and_prefixed():
    env = Environment(["B=2", "A=1", "C"])
    lines = env.export_lines()
    assert lines == sorted(lines)
    assert all(line.startswith("declare -x ") for line in lines)
    assert lines[0] == 'declare -x A="1"'
    assert lines[-1] == "declare -x C"


def test_strip_quotes():
    env = Environment(['A="x"', 'B="y'])
    env.strip_quotes()
    assert list(env) == ["A=x", 'B="y']


def test_export_arguments_invalid_identifier(env):
    before = list(env)
    out = export_arguments(env, ["1x"])
    assert out == "bash: export: `1x': not a valid identifier\n"
    assert list(env) == before


def test_export_arguments_sets_and_strips_quotes(env):
    out = export_arguments(env, ['GREETING="hi"', "FLAG"])
    assert out == ""
    assert env.get("GREETING") == "hi"
    assert "FLAG" in list(env)


def test_export_arguments_without_args_lists(env):
    out = export_arguments(env, [])
    assert out == "".join(line + "\n" for line in env.export_lines())