import json

import pytest

from localizer.workspace import TranslationWorkspace


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


BASE_COMMON = {
    "greeting": "Hello",
    "farewell": "Goodbye",
    "menu": {"open": "Open {file}", "close": "Close"},
}
BASE_ERRORS = {"notFound": "Not found"}


@pytest.fixture
def root(tmp_path):
    """A translations root with an English baseline and a partial Japanese copy."""
    translations = tmp_path / "translations"
    write_json(translations / "en" / "common.json", BASE_COMMON)
    write_json(translations / "en" / "errors.json", BASE_ERRORS)
    write_json(translations / "ja" / "common.json", {
        "greeting": "こんにちは",
        "farewell": "",
        "menu": {"open": "{file} を開く"},
    })
    return translations


@pytest.fixture
def workspace(root, tmp_path):
    return TranslationWorkspace(str(root), "en", backup_dir=str(tmp_path / "backups"))
