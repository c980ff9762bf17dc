"""Command-line interface for managing translation folders."""

import argparse
import json
import logging
import sys
from typing import Optional

from . import __version__
from .config import load_settings
from .errors import LocalizerError
from .providers import ProviderContext
from .translation_engine import AutoTranslator
from .validator import TranslationValidator
from .workspace import TranslationWorkspace

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localizer",
        description="Create, sync, check and auto-translate localization JSON folders.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--dir", dest="translations_dir",
                        help="Translations root folder (default: ./translations)")
    parser.add_argument("--base", dest="base_language",
                        help="Baseline language code (default: en)")
    parser.add_argument("--config", help="JSON settings file (default: localizer.json)")
    parser.add_argument("--env-file", help="Extra .env file to load")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    sub.add_parser("list", help="List language folders")

    p = sub.add_parser("create", help="Create a language from baseline templates")
    p.add_argument("language")

    p = sub.add_parser("delete", help="Delete a language folder")
    p.add_argument("language")
    p.add_argument("--no-backup", action="store_true", help="Skip the backup copy")

    p = sub.add_parser("sync", help="Add baseline keys missing from other languages")
    p.add_argument("languages", nargs="*", help="Languages to sync (default: all)")
    p.add_argument("--report", help="Write a JSON sync report to this path")

    p = sub.add_parser("stats", help="Show translation completeness")
    p.add_argument("language", nargs="?", help="Language (default: all)")
    p.add_argument("--files", action="store_true", help="Break down per file")
    p.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    p = sub.add_parser("validate", help="Check structure and translation quality")
    p.add_argument("language", nargs="?", help="Language (default: all)")
    p.add_argument("--report", help="Write a JSON validation report to this path")

    p = sub.add_parser("translate", help="Auto-translate untranslated text")
    p.add_argument("language")
    p.add_argument("--file", dest="files", action="append", help="Only this file (repeatable)")
    p.add_argument("--overwrite", action="store_true",
                   help="Retranslate text that is already translated")
    p.add_argument("--batch-size", type=int)
    p.add_argument("--concurrency", type=int)

    p = sub.add_parser("export", help="Copy language folders to a timestamped export folder")
    p.add_argument("languages", nargs="*", help="Languages to export (default: all)")
    p.add_argument("--output", help="Folder to create the export in")

    p = sub.add_parser("import", help="Import language folders from a zip archive")
    p.add_argument("archive")

    p = sub.add_parser("show", help="Print a translation file")
    p.add_argument("language")
    p.add_argument("file")

    p = sub.add_parser("set", help="Set one translation value")
    p.add_argument("language")
    p.add_argument("file")
    p.add_argument("key", help="Dotted key path, e.g. menu.file.open")
    p.add_argument("value")

    return parser


# ── Commands ──────────────────────────────────────────────────────

def cmd_list(ws: TranslationWorkspace, args, settings) -> int:
    languages = ws.list_languages()
    if not languages:
        print(f"No language folders in {ws.base_dir}")
        return 0
    print("Languages:")
    for info in languages:
        mark = "⭐" if info.is_base else "  "
        suffix = " (base)" if info.is_base else ""
        print(f"  {mark} {info.code:<12} {info.name:<12} {info.file_count} file(s){suffix}")
    return 0


def cmd_create(ws: TranslationWorkspace, args, settings) -> int:
    files = ws.create_language(args.language)
    print(f"Created {args.language} with {len(files)} template file(s)")
    for name in files:
        print(f"  {args.language}/{name}")
    return 0


def cmd_delete(ws: TranslationWorkspace, args, settings) -> int:
    backup = ws.delete_language(args.language, backup=not args.no_backup)
    print(f"Deleted {args.language}")
    if backup:
        print(f"  backup: {backup}")
    return 0


def cmd_sync(ws: TranslationWorkspace, args, settings) -> int:
    result = ws.sync_all(args.languages or None, report_path=args.report)
    print(f"Languages processed: {result.languages_processed}")
    print(f"Files added:         {result.files_added}")
    print(f"Fields added:        {result.fields_added}")
    if result.errors:
        print("Errors:")
        for err in result.errors:
            print(f"  - {err}")
        return 1
    return 0


def cmd_stats(ws: TranslationWorkspace, args, settings) -> int:
    codes = [args.language] if args.language else [i.code for i in ws.list_languages()]
    output = {}
    for code in codes:
        entry = {"summary": ws.language_stats(code).to_dict()}
        if args.files and ws.language_exists(code):
            entry["files"] = {name: s.to_dict() for name, s in ws.files_with_stats(code)}
        output[code] = entry

    if args.json:
        print(json.dumps(output, ensure_ascii=False, indent=2))
        return 0
    for code, entry in output.items():
        s = entry["summary"]
        print(f"{code:<12} {s['percentage']:>3}%  "
              f"{s['translated']}/{s['total']} translated, {s['empty']} empty")
        for name, fs in entry.get("files", {}).items():
            print(f"    {name:<24} {fs['percentage']:>3}%  {fs['translated']}/{fs['total']}")
    return 0


def cmd_validate(ws: TranslationWorkspace, args, settings) -> int:
    validator = TranslationValidator(ws)
    if args.language:
        validator.validate_language(args.language)
    else:
        validator.validate_all()
    summary = validator.summary()
    print(f"Errors: {summary['errors']}  Warnings: {summary['warnings']}  "
          f"Fatal: {summary['fatal']}")
    for issue in validator.issues:
        print(f"  {issue.level:<7} [{issue.language}] {issue.message}")
    if not validator.issues:
        print("No issues found.")
    if args.report:
        validator.write_report(args.report)
    return 1 if validator.has_errors else 0


def cmd_translate(ws: TranslationWorkspace, args, settings) -> int:
    context = ProviderContext.from_settings(settings)
    translator = AutoTranslator(
        ws, context,
        batch_size=args.batch_size or settings.batch_size,
        max_concurrent=args.concurrency or settings.max_concurrent,
        delay_ms=settings.delay_ms,
    )
    run = translator.translate_language(args.language, files=args.files,
                                        overwrite=args.overwrite)
    for f in run.files:
        print(f"  {f.filename:<24} {f.success} translated, {f.failed} failed, "
              f"{f.skipped} kept ({f.success_rate:.1f}%)")
    print(f"Done in {run.duration:.1f}s: {run.success} translated, {run.failed} failed")
    for err in run.errors:
        print(f"  - {err}")
    return 1 if run.errors else 0


def cmd_export(ws: TranslationWorkspace, args, settings) -> int:
    path = ws.export_languages(args.languages or None, output_dir=args.output)
    print(f"Exported to {path}")
    return 0


def cmd_import(ws: TranslationWorkspace, args, settings) -> int:
    imported = ws.import_archive(args.archive)
    print(f"Imported {len(imported)} language(s): {', '.join(imported) or '-'}")
    return 0


def cmd_show(ws: TranslationWorkspace, args, settings) -> int:
    print(json.dumps(ws.read_file(args.language, args.file), ensure_ascii=False, indent=2))
    return 0


def cmd_set(ws: TranslationWorkspace, args, settings) -> int:
    ws.set_value(args.language, args.file, args.key, args.value)
    print(f"{args.language}/{args.file}: {args.key} updated")
    return 0


COMMANDS = {
    "list": cmd_list,
    "create": cmd_create,
    "delete": cmd_delete,
    "sync": cmd_sync,
    "stats": cmd_stats,
    "validate": cmd_validate,
    "translate": cmd_translate,
    "export": cmd_export,
    "import": cmd_import,
    "show": cmd_show,
    "set": cmd_set,
}


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(args.config, args.env_file)
    if args.translations_dir:
        settings.translations_dir = args.translations_dir
    if args.base_language:
        settings.base_language = args.base_language

    ws = TranslationWorkspace(settings.translations_dir, settings.base_language,
                              settings.backup_dir or None)
    try:
        return COMMANDS[args.command](ws, args, settings)
    except LocalizerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        log.debug("OS error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
