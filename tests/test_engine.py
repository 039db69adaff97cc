"""
Tests for the engine: target ordering, degraded results and hard errors.
"""
import asyncio
from pathlib import Path

import pytest
from pydantic import ValidationError

from srclint.engine import Engine
from srclint.errors import ConfigError, FilesystemError, RuleLoadError
from srclint.ignore import IGNORE_FILENAME
from srclint.options import RunOptions

from conftest import RecordingVerifier, write_tree


def _run(engine: Engine, targets) -> list:
    return asyncio.run(engine.execute_on_files(targets))


def _paths(results) -> list[str]:
    return [r.file_path for r in results]


def test_results_follow_target_order(tmp_path, monkeypatch):
    """Test that results come back in argument order, then discovery order."""
    write_tree(tmp_path, {"a.py": "", "dir/y.py": "", "dir/x.py": "", "z.py": ""})
    monkeypatch.chdir(tmp_path)

    results = _run(Engine(), ["z.py", "dir", "a.py"])

    assert _paths(results) == ["z.py", str(Path("dir") / "x.py"), str(Path("dir") / "y.py"), "a.py"]


def test_missing_file_is_a_degraded_result(tmp_path, monkeypatch):
    """A named file that does not exist gets one fatal message; the run goes on."""
    write_tree(tmp_path, {"a.py": ""})
    monkeypatch.chdir(tmp_path)

    results = _run(Engine(), ["nope.py", "a.py"])

    assert _paths(results) == ["nope.py", "a.py"]
    assert len(results[0].messages) == 1
    assert results[0].messages[0].fatal
    assert results[0].messages[0].message == f"Could not find file at '{tmp_path / 'nope.py'}'."
    assert results[1].messages == []


def test_missing_directory_is_a_hard_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(FilesystemError):
        _run(Engine(), ["missing-dir/"])


def test_callback_gets_error_and_no_results(tmp_path, monkeypatch):
    """Test that a failed run reports only the error, exactly once."""
    write_tree(tmp_path, {"a.py": ""})
    monkeypatch.chdir(tmp_path)
    calls = []

    Engine().execute(["a.py", "missing-dir/"], lambda err, results: calls.append((err, results)))

    assert len(calls) == 1
    err, results = calls[0]
    assert isinstance(err, FilesystemError)
    assert results is None


def test_callback_gets_results_and_no_error(tmp_path):
    write_tree(tmp_path, {"a.py": "print('hi')\n"})
    calls = []

    Engine().execute([tmp_path], lambda err, results: calls.append((err, results)))

    assert len(calls) == 1
    err, results = calls[0]
    assert err is None
    assert _paths(results) == [str(tmp_path / "a.py")]
    assert results[0].messages[0].rule_id == "no-print"


def test_sequential_runs_concatenate(tmp_path):
    """Running [a, b] equals running [a] then [b]."""
    write_tree(
        tmp_path,
        {
            "single.py": "eval('1')\n",
            "tree/one.py": "print(1)\n",
            "tree/two.py": "",
            "tree/" + IGNORE_FILENAME: "two.py\n",
        },
    )
    engine = Engine()
    file_target = str(tmp_path / "single.py")
    dir_target = str(tmp_path / "tree")

    combined = _run(engine, [file_target, dir_target])
    separate = _run(engine, [file_target]) + _run(engine, [dir_target])

    assert combined == separate
    assert _paths(combined) == [file_target, str(tmp_path / "tree" / "one.py")]


def test_each_file_is_verified_after_a_reset(tmp_path):
    write_tree(tmp_path, {"a.py": "", "b.py": ""})
    verifier = RecordingVerifier()

    _run(Engine(verifier=verifier), [tmp_path, tmp_path / "a.py"])

    assert [event for event, _ in verifier.events] == ["reset", "verify"] * 3


def test_options_from_mapping(tmp_path):
    """Caller options are layered over the defaults."""
    write_tree(tmp_path, {"a.py": "print(1)\neval('1')\n"})

    engine = Engine({"rules": {"no-print": "off"}})
    results = _run(engine, [tmp_path / "a.py"])

    assert engine.options.ignore is True
    assert engine.options.extensions == (".py",)
    assert [m.rule_id for m in results[0].messages] == ["no-eval"]


def test_invalid_options_are_rejected():
    with pytest.raises(ValidationError):
        Engine({"no_such_option": True})


def test_invalid_inline_rule_is_a_config_error(tmp_path):
    write_tree(tmp_path, {"a.py": ""})

    with pytest.raises(ConfigError):
        _run(Engine({"rules": {"no-print": "loud"}}), [tmp_path / "a.py"])


def test_rule_paths_are_loaded(tmp_path):
    """Test that rules from a rules directory run alongside the builtins."""
    rules_dir = tmp_path / "rules"
    write_tree(
        rules_dir,
        {
            "todo.py": (
                "import ast\n"
                "from srclint.rules import Rule\n"
                "\n"
                "\n"
                "class NoTodoNameRule(Rule):\n"
                "    RULE_ID = 'no-todo-name'\n"
                "    DEFAULT_SEVERITY = 1\n"
                "    NODE_TYPES = (ast.Name,)\n"
                "\n"
                "    def check(self, node, visitor):\n"
                "        if node.id == 'todo':\n"
                "            return self.report(node, \"Rename 'todo'.\")\n"
                "        return None\n"
            ),
        },
    )
    write_tree(tmp_path, {"src/a.py": "todo = 1\n"})

    results = _run(Engine(RunOptions(rule_paths=[rules_dir])), [tmp_path / "src"])

    assert len(results) == 1
    assert [(m.rule_id, m.severity, m.line) for m in results[0].messages] == [("no-todo-name", 1, 1)]


def test_missing_rules_directory(tmp_path):
    with pytest.raises(RuleLoadError):
        Engine({"rule_paths": [tmp_path / "missing"]})



def test_callback_gets_undecodable_ignore_file_error(tmp_path):
    """Test that a bad ignore file reaches the callback as the run's error."""
    write_tree(tmp_path, {"a.py": ""})
    (tmp_path / IGNORE_FILENAME).write_bytes(b"\xff\xfe b.py\n")
    calls = []

    Engine().execute([tmp_path], lambda err, results: calls.append((err, results)))

    assert len(calls) == 1
    err, results = calls[0]
    assert isinstance(err, FilesystemError)
    assert results is None


def test_callback_gets_undecodable_config_file_error(tmp_path):
    write_tree(tmp_path, {"a.py": ""})
    (tmp_path / ".srclintrc.toml").write_bytes(b"[rules]\nno-print = '\xff'\n")
    calls = []

    Engine().execute([tmp_path / "a.py"], lambda err, results: calls.append((err, results)))

    assert len(calls) == 1
    err, results = calls[0]
    assert isinstance(err, ConfigError)
    assert results is None
