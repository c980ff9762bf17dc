"""Structure and quality checks for translation files."""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime

from . import PLACEHOLDER_RE
from .errors import LocalizerError, NotFoundError
from .tree import Leaf, Node, Tree, join_path
from .workspace import TranslationWorkspace

log = logging.getLogger(__name__)

FATAL = "FATAL"
ERROR = "ERROR"
WARNING = "WARNING"

# Target/baseline length ratios outside this range are suspicious
MIN_LENGTH_RATIO = 0.3
MAX_LENGTH_RATIO = 3.0


@dataclass
class Issue:
    language: str
    level: str     # FATAL | ERROR | WARNING
    message: str


def extract_variables(text: str) -> list:
    """Names of ``{placeholder}`` variables in order of appearance."""
    return PLACEHOLDER_RE.findall(text)


@dataclass
class TranslationValidator:
    """Collects issues for one or more languages against the baseline."""
    workspace: TranslationWorkspace
    issues: list = field(default_factory=list)

    def add_issue(self, language: str, level: str, message: str):
        self.issues.append(Issue(language, level, message))

    def validate_all(self) -> list:
        """Validate every non-baseline language; returns the issue list."""
        for info in self.workspace.list_languages():
            if not info.is_base:
                self.validate_language(info.code)
        return self.issues

    def validate_language(self, code: str) -> list:
        ws = self.workspace
        if not ws.language_exists(code):
            self.add_issue(code, FATAL, "Language folder does not exist")
            return self.issues
        for filename in ws.list_files(ws.base_language):
            self.validate_file(code, filename)
        return self.issues

    def validate_file(self, code: str, filename: str):
        ws = self.workspace
        target_path = ws.file_path(code, filename)
        if not os.path.isfile(target_path):
            self.add_issue(code, ERROR, f"{filename} is missing")
            return
        try:
            baseline = ws.read_tree(ws.file_path(ws.base_language, filename))
            target = ws.read_tree(target_path)
        except NotFoundError as e:
            self.add_issue(code, ERROR, f"{filename}: {e}")
            return
        except LocalizerError as e:
            self.add_issue(code, ERROR, f"{filename} has invalid JSON: {e}")
            return
        self._check_structure(code, filename, baseline, target, ())
        self._check_quality(code, filename, baseline, target, ())

    def _check_structure(self, code: str, filename: str, baseline: Tree,
                         target: Tree, path: tuple):
        if not isinstance(baseline, Node):
            return
        if not isinstance(target, Node):
            self.add_issue(code, ERROR, f'{filename}: "{join_path(path) or "<root>"}" type mismatch')
            return
        for key, value in baseline.children.items():
            here = path + (key,)
            if key not in target:
                self.add_issue(code, ERROR, f'{filename}: missing key "{join_path(here)}"')
            elif isinstance(value, Node):
                self._check_structure(code, filename, value, target.get(key), here)

    def _check_quality(self, code: str, filename: str, baseline: Tree,
                       target: Tree, path: tuple):
        if isinstance(baseline, Node):
            if isinstance(target, Node):
                for key, value in baseline.children.items():
                    if key in target:
                        self._check_quality(code, filename, value, target.get(key), path + (key,))
            return
        if not (isinstance(target, Leaf) and isinstance(baseline.value, str)
                and isinstance(target.value, str)):
            return

        where = join_path(path)
        base_text, text = baseline.value, target.value
        if text.strip() == "":
            self.add_issue(code, WARNING, f'{filename}: "{where}" is empty')
            return
        if text == base_text and code != self.workspace.base_language:
            self.add_issue(code, WARNING, f'{filename}: "{where}" may be untranslated')

        base_vars = extract_variables(base_text)
        target_vars = extract_variables(text)
        missing = [v for v in base_vars if v not in target_vars]
        extra = [v for v in target_vars if v not in base_vars]
        if missing:
            self.add_issue(code, ERROR, f'{filename}: "{where}" missing variables: {", ".join(missing)}')
        if extra:
            self.add_issue(code, WARNING, f'{filename}: "{where}" extra variables: {", ".join(extra)}')

        if base_text:
            ratio = len(text) / len(base_text)
            if ratio < MIN_LENGTH_RATIO:
                self.add_issue(code, WARNING, f'{filename}: "{where}" translation may be too short ({ratio:.2f})')
            elif ratio > MAX_LENGTH_RATIO:
                self.add_issue(code, WARNING, f'{filename}: "{where}" translation may be too long ({ratio:.2f})')

    def summary(self) -> dict:
        return {
            "total": len(self.issues),
            "errors": sum(1 for i in self.issues if i.level == ERROR),
            "warnings": sum(1 for i in self.issues if i.level == WARNING),
            "fatal": sum(1 for i in self.issues if i.level == FATAL),
        }

    @property
    def has_errors(self) -> bool:
        return any(i.level in (ERROR, FATAL) for i in self.issues)

    def write_report(self, path: str):
        """Write summary and issues as a JSON report."""
        report = {
            "timestamp": datetime.now().isoformat(),
            "summary": self.summary(),
            "issues": [asdict(i) for i in self.issues],
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, ensure_ascii=False, indent=2)
        log.info("Validation report written to %s", path)
