import pytest

from minishell.env import Environment, is_valid_identifier, join_path


def test_from_strings_round_trip():
    entries = ["PATH=/usr/bin:/bin", "HOME=/home/user", "EMPTY="]
    env = Environment.from_strings(entries)
    assert env.to_envp() == entries


def test_value_may_contain_equals():
    env = Environment.from_strings(["OPTS=a=b=c"])
    assert env.get("OPTS") == "a=b=c"


def test_bare_key_has_no_value():
    env = Environment()
    env.add("FOO")
    assert "FOO" in env
    assert env.get("FOO") is None
    assert env.to_envp() == ["FOO="]


def test_get_missing_is_none():
    assert Environment.from_strings(["A=1"]).get("B") is None


def test_duplicate_add_keeps_first():
    env = Environment.from_strings(["A=1", "A=2"])
    assert env.get("A") == "1"
    assert len(env) == 1


def test_update_only_existing():
    env = Environment.from_strings(["PWD=/old"])
    assert env.update("PWD", "/new") is True
    assert env.get("PWD") == "/new"
    assert env.update("OLDPWD", "/old") is False
    assert "OLDPWD" not in env


def test_set_appends_or_replaces():
    env = Environment.from_strings(["A=1"])
    env.set("B", "2")
    env.set("A", "3")
    assert list(env.items()) == [("A", "3"), ("B", "2")]


def test_remove():
    env = Environment.from_strings(["A=1", "B=2", "C=3"])
    assert env.remove("B") is True
    assert env.remove("B") is False
    assert list(env) == ["A", "C"]


def test_sort_orders_keys():
    env = Environment.from_strings(["b=2", "A=1", "_x=3", "a=4"])
    env.sort()
    keys = list(env)
    assert keys == sorted(keys)
    assert env.get("a") == "4"
    assert len(env) == 4


def test_items_snapshot_allows_mutation():
    env = Environment.from_strings(["A=1", "B=2"])
    for key, _ in env.items():
        env.remove(key)
    assert len(env) == 0


@pytest.mark.parametrize("name", ["HOME", "_", "_a1", "A_B=value", "x=1=2", "a="])
def test_valid_identifiers(name):
    assert is_valid_identifier(name) is True


@pytest.mark.parametrize("name", ["", "1A", "=x", "A-B", "a b", "-n", "A.B=1"])
def test_invalid_identifiers(name):
    assert is_valid_identifier(name) is False


def test_join_path_adds_slash():
    assert join_path("/usr/bin", "ls") == "/usr/bin/ls"


def test_join_path_keeps_single_slash():
    assert join_path("/usr/bin/", "ls") == "/usr/bin/ls"