"""
Tests for the srclint command line.
"""
from typer.testing import CliRunner

from srclint.cli import EXIT_ENGINE_ERROR, EXIT_LINT_ERRORS, EXIT_OK, app

from conftest import write_tree

runner = CliRunner()


def test_clean_directory(tmp_path):
    write_tree(tmp_path, {"a.py": "x = 1\n"})

    result = runner.invoke(app, [str(tmp_path)])

    assert result.exit_code == EXIT_OK
    assert "Lint Complete!" in result.output


def test_errors_set_exit_code(tmp_path):
    """Test that error-severity messages fail the run."""
    write_tree(tmp_path, {"a.py": "eval('1')\n"})

    result = runner.invoke(app, [str(tmp_path)])

    assert result.exit_code == EXIT_LINT_ERRORS
    assert "eval() can be harmful." in result.output


def test_warnings_alone_pass(tmp_path):
    write_tree(tmp_path, {"a.py": "print(1)\n"})

    result = runner.invoke(app, [str(tmp_path)])

    assert result.exit_code == EXIT_OK
    assert "no-print" in result.output


def test_rule_option(tmp_path):
    write_tree(tmp_path, {"a.py": "eval('1')\n"})

    result = runner.invoke(app, [str(tmp_path), "--rule", "no-eval=off"])

    assert result.exit_code == EXIT_OK


def test_bad_rule_option(tmp_path):
    result = runner.invoke(app, [str(tmp_path), "--rule", "no-eval"])

    assert result.exit_code == EXIT_ENGINE_ERROR


def test_missing_directory_is_engine_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["missing/"])

    assert result.exit_code == EXIT_ENGINE_ERROR


def test_missing_file_is_reported(tmp_path, monkeypatch):
    """A missing file is a lint error, not an engine error."""
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["nope.py"])

    assert result.exit_code == EXIT_LINT_ERRORS
    assert "Could not find file" in result.output


def test_no_ignore(tmp_path):
    write_tree(tmp_path, {"a.py": "eval('1')\n", ".srclintignore": "a.py\n"})

    assert runner.invoke(app, [str(tmp_path)]).exit_code == EXIT_OK
    assert runner.invoke(app, [str(tmp_path), "--no-ignore"]).exit_code == EXIT_LINT_ERRORS


def test_undecodable_ignore_file_is_engine_error(tmp_path):
    write_tree(tmp_path, {"a.py": ""})
    (tmp_path / ".srclintignore").write_bytes(b"\xff\xfe a.py\n")

    result = runner.invoke(app, [str(tmp_path)])

    assert result.exit_code == EXIT_ENGINE_ERROR
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_markup_in_paths_is_printed_literally(tmp_path, monkeypatch):
    """Test that brackets in file paths are not read as rich markup."""
    write_tree(tmp_path, {"a[/b]/c.py": "print(1)\n"})
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["."])

    assert result.exit_code == EXIT_OK
    assert "a[/b]/c.py" in result.output
