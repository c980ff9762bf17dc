"""Translation workspace — language folders, files, stats, sync and backups.

The workspace root holds one sub-folder per language code, each with the
same set of ``*.json`` files.  One language is the baseline: new languages
are bootstrapped from it and every other language is kept structurally in
line with it.
"""

import json
import logging
import os
import shutil
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from . import DEFAULT_BASE_LANGUAGE
from .errors import (
    InvalidLanguageError,
    LanguageExistsError,
    LocalizerError,
    NotFoundError,
    StructuralMismatchError,
    TreeIOError,
)
from .merger import sync
from .stats import TranslationStats, count_keys
from .tree import Node, Tree, empty_mirror, from_json, leaf_count, set_leaf, split_path, to_json

log = logging.getLogger(__name__)


LANGUAGE_NAMES = {
    "en": "English",
    "zh-TW": "繁體中文",
    "zh-Hant-TW": "繁體中文",
    "zh-CN": "简体中文",
    "ja": "日本語",
    "ko": "한국어",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "it": "Italiano",
    "pt": "Português",
    "ru": "Русский",
    "nl": "Nederlands",
    "pl": "Polski",
    "tr": "Türkçe",
    "vi": "Tiếng Việt",
    "th": "ไทย",
    "ar": "العربية",
}


def language_name(code: str) -> str:
    """Human-readable name for a language code, or the code itself."""
    return LANGUAGE_NAMES.get(code, code)


def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S")


@dataclass
class LanguageInfo:
    code: str
    name: str
    file_count: int = 0
    is_base: bool = False

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "fileCount": self.file_count,
            "isBase": self.is_base,
        }


@dataclass
class SyncResult:
    """Summary of one sync run across languages."""
    languages_processed: int = 0
    files_added: int = 0
    fields_added: int = 0
    errors: list = field(default_factory=list)  # "<code>[/<file>]: <message>"

    def to_dict(self) -> dict:
        return {
            "languagesProcessed": self.languages_processed,
            "filesAdded": self.files_added,
            "fieldsAdded": self.fields_added,
            "errors": list(self.errors),
        }


class TranslationWorkspace:
    """File-backed collection of language folders rooted at ``base_dir``."""

    def __init__(self, base_dir: str = "./translations",
                 base_language: str = DEFAULT_BASE_LANGUAGE,
                 backup_dir: Optional[str] = None):
        self.base_dir = base_dir
        self.base_language = base_language
        self.backup_dir = backup_dir or os.path.join(
            os.path.dirname(os.path.abspath(base_dir)), "translations_backups")

    # ── Filesystem collaborator ───────────────────────────────────

    @staticmethod
    def read_tree(path: str) -> Tree:
        """Load a JSON file as a tree."""
        if not os.path.isfile(path):
            raise NotFoundError(f"File not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise TreeIOError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise TreeIOError(f"Could not read {path}: {e}") from e
        return from_json(data)

    @staticmethod
    def write_tree(path: str, tree: Tree):
        """Write a tree as pretty-printed UTF-8 JSON."""
        parent = os.path.dirname(path)
        try:
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(to_json(tree), f, ensure_ascii=False, indent=2)
                f.write("\n")
        except OSError as e:
            raise TreeIOError(f"Could not write {path}: {e}") from e

    @staticmethod
    def list_entries(directory: str) -> list:
        if not os.path.isdir(directory):
            return []
        return sorted(os.listdir(directory))

    @staticmethod
    def is_directory(path: str) -> bool:
        return os.path.isdir(path)

    # ── Registry ──────────────────────────────────────────────────

    def language_dir(self, code: str) -> str:
        self._check_code(code)
        return os.path.join(self.base_dir, code)

    def language_exists(self, code: str) -> bool:
        return self.is_directory(self.language_dir(code))

    def list_files(self, code: str) -> list:
        """Sorted ``*.json`` filenames of a language."""
        lang_dir = self.language_dir(code)
        if not self.is_directory(lang_dir):
            raise NotFoundError(f"Language folder not found: {code}")
        return [name for name in self.list_entries(lang_dir)
                if name.endswith(".json")
                and os.path.isfile(os.path.join(lang_dir, name))]

    def list_languages(self) -> list:
        """Return LanguageInfo for every language folder, sorted by code."""
        languages = []
        for name in self.list_entries(self.base_dir):
            if name.startswith(".") or not self.is_directory(os.path.join(self.base_dir, name)):
                continue
            languages.append(LanguageInfo(
                code=name,
                name=language_name(name),
                file_count=len(self.list_files(name)),
                is_base=name == self.base_language,
            ))
        return languages

    def file_path(self, code: str, filename: str) -> str:
        if os.path.basename(filename) != filename or not filename.endswith(".json"):
            raise InvalidLanguageError(f"Invalid translation filename: {filename!r}")
        return os.path.join(self.language_dir(code), filename)

    @staticmethod
    def _check_code(code: str):
        if (not code or code.startswith(".") or "/" in code or "\\" in code
                or os.sep in code):
            raise InvalidLanguageError(f"Invalid language code: {code!r}")

    # ── Lifecycle ─────────────────────────────────────────────────

    def create_language(self, code: str) -> list:
        """Create a language folder with blank templates of every baseline file.

        Returns:
            The list of filenames written.
        """
        target_dir = self.language_dir(code)
        if self.is_directory(target_dir):
            raise LanguageExistsError(f"Language already exists: {code}")
        base_files = self.list_files(self.base_language)

        os.makedirs(target_dir)
        log.info("Created language folder %s", target_dir)
        for filename in base_files:
            base_tree = self.read_object(self.file_path(self.base_language, filename))
            self.write_tree(self.file_path(code, filename), empty_mirror(base_tree))
            log.debug("Wrote template %s/%s", code, filename)
        return base_files

    def delete_language(self, code: str, backup: bool = True) -> Optional[str]:
        """Remove a language folder, backing it up first unless told not to.

        Returns:
            The backup path, or None when no backup was taken.
        """
        if code == self.base_language:
            raise LocalizerError("Cannot delete the base language")
        lang_dir = self.language_dir(code)
        if not self.is_directory(lang_dir):
            raise NotFoundError(f"Language folder not found: {code}")
        backup_path = self.backup_language(code) if backup else None
        shutil.rmtree(lang_dir)
        log.info("Deleted language %s", code)
        return backup_path

    def backup_language(self, code: str) -> str:
        """Copy a language folder to a timestamped location under backup_dir."""
        lang_dir = self.language_dir(code)
        if not self.is_directory(lang_dir):
            raise NotFoundError(f"Language folder not found: {code}")
        stamp = _timestamp()
        backup_path = os.path.join(self.backup_dir, f"{code}-{stamp}")
        n = 1
        while os.path.exists(backup_path):
            backup_path = os.path.join(self.backup_dir, f"{code}-{stamp}-{n}")
            n += 1
        os.makedirs(self.backup_dir, exist_ok=True)
        shutil.copytree(lang_dir, backup_path)
        log.info("Backed up %s to %s", code, backup_path)
        return backup_path

    # ── File CRUD ─────────────────────────────────────────────────

    def read_file(self, code: str, filename: str) -> dict:
        return to_json(self.read_object(self.file_path(code, filename)))

    def write_file(self, code: str, filename: str, content: dict):
        if not isinstance(content, dict):
            raise StructuralMismatchError("Translation file content must be a JSON object")
        if not self.language_exists(code):
            raise NotFoundError(f"Language folder not found: {code}")
        self.write_tree(self.file_path(code, filename), from_json(content))

    def set_value(self, code: str, filename: str, key: str, value):
        """Set one leaf addressed by a dotted key path."""
        keys = split_path(key)
        if not keys:
            raise LocalizerError(f"Invalid key path: {key!r}")
        path = self.file_path(code, filename)
        tree = self.read_object(path)
        set_leaf(tree, keys, value)
        self.write_tree(path, tree)

    def read_object(self, path: str) -> Node:
        tree = self.read_tree(path)
        if not isinstance(tree, Node):
            raise StructuralMismatchError(f"Root of {path} is not a JSON object")
        return tree

    # ── Stats ─────────────────────────────────────────────────────

    def file_stats(self, code: str, filename: str) -> TranslationStats:
        """Completeness of one file, compared against the baseline file."""
        tree = self.read_tree(self.file_path(code, filename))
        baseline = None
        if code != self.base_language:
            base_path = self.file_path(self.base_language, filename)
            if os.path.isfile(base_path):
                baseline = self.read_tree(base_path)
        return count_keys(tree, baseline)

    def files_with_stats(self, code: str) -> list:
        """``[(filename, TranslationStats)]``; unreadable files count as zero."""
        result = []
        for filename in self.list_files(code):
            try:
                stats = self.file_stats(code, filename)
            except (LocalizerError, OSError) as e:
                log.warning("Skipping %s/%s in stats: %s", code, filename, e)
                stats = TranslationStats()
            result.append((filename, stats))
        return result

    def language_stats(self, code: str) -> TranslationStats:
        """Aggregate completeness for a language (zero when it does not exist)."""
        if not self.language_exists(code):
            return TranslationStats()
        total = TranslationStats()
        for _, stats in self.files_with_stats(code):
            total = total + stats
        return total

    # ── Sync ──────────────────────────────────────────────────────

    def sync_language(self, code: str) -> tuple:
        """Add every baseline key missing from a language's files.

        A file that cannot be read or synced is recorded as
        ``"<code>/<file>: <message>"`` and the remaining files still run.

        Returns:
            (files_added, fields_added, errors)
        """
        if code == self.base_language:
            return 0, 0, []
        if not self.language_exists(code):
            raise NotFoundError(f"Language folder not found: {code}")

        files_added = fields_added = 0
        errors = []
        for filename in self.list_files(self.base_language):
            try:
                added = self._sync_file(code, filename)
            except (LocalizerError, OSError) as e:
                log.error("Sync failed for %s/%s: %s", code, filename, e)
                errors.append(f"{code}/{filename}: {e}")
                continue
            files_added += added[0]
            fields_added += added[1]
        return files_added, fields_added, errors

    def _sync_file(self, code: str, filename: str) -> tuple:
        """Sync one file; returns (files_added, fields_added)."""
        baseline = self.read_object(self.file_path(self.base_language, filename))
        target_path = self.file_path(code, filename)
        if not os.path.isfile(target_path):
            template = empty_mirror(baseline)
            self.write_tree(target_path, template)
            log.info("%s: added missing file %s", code, filename)
            return 1, leaf_count(template)

        outcome = sync(baseline, self.read_object(target_path))
        if outcome.changed:
            self.write_tree(target_path, outcome.updated)
            log.info("%s/%s: added %d field(s)", code, filename, outcome.fields_added)
        return 0, outcome.fields_added

    def sync_all(self, languages: Optional[list] = None,
                 report_path: Optional[str] = None) -> SyncResult:
        """Sync every non-baseline language (or just ``languages``).

        Failures are recorded per language or per file and the rest still
        run.  A language counts as processed only when all its files synced;
        counts from files that did sync are kept either way.
        """
        if not self.language_exists(self.base_language):
            raise NotFoundError(f"Base language folder not found: {self.base_language}")
        if languages is None:
            languages = [info.code for info in self.list_languages() if not info.is_base]

        result = SyncResult()
        for code in languages:
            if code == self.base_language:
                continue
            try:
                files_added, fields_added, errors = self.sync_language(code)
            except (LocalizerError, OSError) as e:
                log.error("Sync failed for %s: %s", code, e)
                result.errors.append(f"{code}: {e}")
                continue
            result.files_added += files_added
            result.fields_added += fields_added
            result.errors.extend(errors)
            if not errors:
                result.languages_processed += 1

        if report_path:
            report = {"timestamp": datetime.now().isoformat(), **result.to_dict()}
            with open(report_path, "w", encoding="utf-8") as f:
                json.dump(report, f, ensure_ascii=False, indent=2)
        return result

    # ── Export / import ───────────────────────────────────────────

    def export_languages(self, codes: Optional[list] = None,
                         output_dir: Optional[str] = None) -> str:
        """Copy language folders into ``<output_dir>/translations-<timestamp>``."""
        if codes is None:
            codes = [info.code for info in self.list_languages()]
        output_dir = output_dir or os.path.join(
            os.path.dirname(os.path.abspath(self.base_dir)), "exports")
        export_dir = os.path.join(output_dir, f"translations-{_timestamp()}")
        os.makedirs(export_dir, exist_ok=True)
        exported = 0
        for code in codes:
            source = self.language_dir(code)
            if not self.is_directory(source):
                log.warning("Export skip — language not found: %s", code)
                continue
            shutil.copytree(source, os.path.join(export_dir, code))
            exported += 1
        log.info("Exported %d language(s) to %s", exported, export_dir)
        return export_dir

    def import_archive(self, zip_path: str) -> list:
        """Import language folders from a zip archive.

        Top-level folders of the archive are language codes; one wrapping
        folder (e.g. ``translations-<timestamp>/``) is tolerated.  Existing
        languages are backed up before being replaced.

        Returns:
            Sorted list of imported language codes.
        """
        if not os.path.isfile(zip_path):
            raise NotFoundError(f"Archive not found: {zip_path}")
        try:
            with zipfile.ZipFile(zip_path, "r") as zf:
                files = self._archive_files(zf)
                by_lang = {}
                for name in files:
                    code, filename = name
                    by_lang.setdefault(code, []).append((filename, files[name]))
                payload = {
                    code: [(filename, zf.read(member)) for filename, member in items]
                    for code, items in by_lang.items()
                }
        except zipfile.BadZipFile as e:
            raise TreeIOError(f"Not a zip archive: {zip_path}") from e

        parsed_by_lang = {}
        for code in sorted(payload):
            self._check_code(code)
            parsed = parsed_by_lang[code] = []
            for filename, raw in payload[code]:
                try:
                    data = json.loads(raw.decode("utf-8"))
                except (UnicodeDecodeError, json.JSONDecodeError) as e:
                    raise TreeIOError(f"Invalid JSON in archive {code}/{filename}: {e}") from e
                if not isinstance(data, dict):
                    raise StructuralMismatchError(
                        f"Root of archive {code}/{filename} is not a JSON object")
                parsed.append((filename, data))

        imported = []
        for code, parsed in parsed_by_lang.items():
            if self.language_exists(code):
                self.backup_language(code)
                shutil.rmtree(self.language_dir(code))
            for filename, data in parsed:
                self.write_tree(self.file_path(code, filename), from_json(data))
            imported.append(code)
            log.info("Imported %s (%d file(s))", code, len(parsed))
        return imported

    @staticmethod
    def _archive_files(zf: zipfile.ZipFile) -> dict:
        """Map ``(code, filename)`` to archive member names for every JSON file."""
        members = []
        for info in zf.infolist():
            if info.is_dir():
                continue
            parts = [p for p in info.filename.replace("\\", "/").split("/") if p]
            if any(p in ("..", ".") for p in parts) or info.filename.startswith("/"):
                raise TreeIOError(f"Unsafe path in archive: {info.filename}")
            if parts and parts[-1].endswith(".json") and not parts[0].startswith("__MACOSX"):
                members.append((parts, info.filename))

        # Strip a single wrapping folder shared by every member
        if members and all(len(p) == 3 for p, _ in members) \
                and len({p[0] for p, _ in members}) == 1:
            members = [(p[1:], name) for p, name in members]

        files = {}
        for parts, name in members:
            if len(parts) != 2:
                log.warning("Import skip — unexpected archive entry %s", name)
                continue
            files[(parts[0], parts[1])] = name
        return files
