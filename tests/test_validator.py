import json

from localizer.validator import ERROR, FATAL, WARNING, TranslationValidator, extract_variables

from conftest import write_json


def messages(validator, level):
    return [i.message for i in validator.issues if i.level == level]


def test_extract_variables():
    assert extract_variables("Hi {name}, you have {count} items") == ["name", "count"]


def test_missing_language_is_fatal(workspace):
    v = TranslationValidator(workspace)
    v.validate_language("ko")
    assert v.summary()["fatal"] == 1
    assert v.has_errors


def test_structure_and_quality_issues(workspace, root):
    write_json(root / "ja" / "common.json", {
        "greeting": "Hello",              # untranslated copy
        "farewell": "   ",                # blank
        "menu": {"open": "開く {path}"},  # wrong variable, close missing
    })
    v = TranslationValidator(workspace)
    v.validate_language("ja")
    errors = messages(v, ERROR)
    warnings = messages(v, WARNING)
    assert 'common.json: missing key "menu.close"' in errors
    assert 'common.json: "menu.open" missing variables: file' in errors
    assert "errors.json is missing" in errors
    assert 'common.json: "greeting" may be untranslated' in warnings
    assert 'common.json: "farewell" is empty' in warnings
    assert 'common.json: "menu.open" extra variables: path' in warnings


def test_type_mismatch_and_invalid_json(workspace, root):
    write_json(root / "ja" / "common.json", {"greeting": "やあ", "farewell": "じゃあ",
                                             "menu": "メニュー"})
    (root / "ja" / "errors.json").write_text("{oops", encoding="utf-8")
    v = TranslationValidator(workspace)
    v.validate_language("ja")
    errors = messages(v, ERROR)
    assert 'common.json: "menu" type mismatch' in errors
    assert any(m.startswith("errors.json has invalid JSON") for m in errors)


def test_length_ratio_warnings(workspace, root):
    write_json(root / "en" / "errors.json", {"notFound": "The requested page was not found"})
    write_json(root / "ja" / "errors.json", {"notFound": "無"})
    v = TranslationValidator(workspace)
    v.validate_file("ja", "errors.json")
    assert any("too short" in m for m in messages(v, WARNING))


def test_validate_all_skips_baseline_and_writes_report(workspace, tmp_path):
    v = TranslationValidator(workspace)
    v.validate_all()
    assert {i.language for i in v.issues} == {"ja"}
    report_path = tmp_path / "report.json"
    v.write_report(str(report_path))
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["summary"]["total"] == len(v.issues)
    assert report["issues"][0]["language"] == "ja"
    assert "timestamp" in report
