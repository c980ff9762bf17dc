import pytest

from localizer.cli import main
from localizer.config import ENV_VARS

from conftest import read_json


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


def run(root, *args):
    return main(["--dir", str(root), *args])


def test_list(root, capsys):
    assert run(root, "list") == 0
    out = capsys.readouterr().out
    assert "en" in out and "(base)" in out and "日本語" in out


def test_create_sync_stats(root, capsys):
    assert run(root, "create", "fr") == 0
    assert (root / "fr" / "common.json").exists()
    assert run(root, "sync") == 0
    out = capsys.readouterr().out
    assert "Fields added:        2" in out
    assert run(root, "stats", "ja", "--files") == 0
    out = capsys.readouterr().out
    assert "ja" in out and "common.json" in out


def test_create_existing_reports_error(root, capsys):
    assert run(root, "create", "ja") == 1
    assert "already exists" in capsys.readouterr().err


def test_set_and_show(root, capsys):
    assert run(root, "set", "ja", "common.json", "farewell", "さようなら") == 0
    assert read_json(root / "ja" / "common.json")["farewell"] == "さようなら"
    assert run(root, "show", "ja", "common.json") == 0
    assert "さようなら" in capsys.readouterr().out


def test_validate_exit_code(root):
    # ja is missing errors.json and menu.close
    assert run(root, "validate", "ja") == 1


def test_delete_and_export(root, tmp_path, capsys):
    assert run(root, "export", "ja", "--output", str(tmp_path / "out")) == 0
    assert "Exported to" in capsys.readouterr().out
    assert run(root, "delete", "ja", "--no-backup") == 0
    assert not (root / "ja").exists()
    assert run(root, "delete", "en") == 1


def test_translate_base_language_refused(root, capsys):
    assert run(root, "translate", "en") == 1
    assert "base language" in capsys.readouterr().err
