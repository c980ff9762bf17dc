"""Auto-translation — fills untranslated leaves via the provider context."""

import concurrent.futures
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from .errors import LocalizerError, NotFoundError
from .merger import sync
from .providers import ProviderContext
from .tree import Node, empty_mirror, get_tree, iter_leaves, join_path, set_leaf
from .workspace import TranslationWorkspace

log = logging.getLogger(__name__)


@dataclass
class FileTranslationResult:
    filename: str
    success: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def success_rate(self) -> float:
        attempted = self.success + self.failed
        return self.success / attempted * 100 if attempted else 0.0


@dataclass
class TranslationRunResult:
    language: str
    files: list = field(default_factory=list)   # FileTranslationResult
    errors: list = field(default_factory=list)  # "<file>: <message>"
    duration: float = 0.0

    @property
    def success(self) -> int:
        return sum(f.success for f in self.files)

    @property
    def failed(self) -> int:
        return sum(f.failed for f in self.files)


class AutoTranslator:
    """Translates baseline text into a target language in concurrent batches."""

    def __init__(self, workspace: TranslationWorkspace, context: ProviderContext,
                 batch_size: int = 25, max_concurrent: int = 6, delay_ms: int = 30):
        self.workspace = workspace
        self.context = context
        self.batch_size = max(1, batch_size)
        self.max_concurrent = max(1, max_concurrent)
        self.delay_ms = delay_ms

    def translate_file(self, filename: str, target_lang: str,
                       overwrite: bool = False) -> FileTranslationResult:
        """Translate one baseline file into ``target_lang`` and write it.

        Only leaves that are still untranslated (empty, or identical to the
        baseline text) are sent unless ``overwrite`` is set.  Translations
        that come back empty or unchanged are counted as failures and leave
        the target untouched.
        """
        ws = self.workspace
        baseline = ws.read_object(ws.file_path(ws.base_language, filename))
        target_path = ws.file_path(target_lang, filename)
        try:
            target = sync(baseline, ws.read_object(target_path)).updated
        except NotFoundError:
            target = empty_mirror(baseline)

        result = FileTranslationResult(filename)
        items = []
        for keys, leaf in iter_leaves(baseline):
            if not isinstance(leaf.value, str) or not leaf.value.strip():
                continue
            current = get_tree(target, keys)
            if isinstance(current, Node):
                # Object where the baseline has text: keep it
                log.warning("%s: %s is an object in %s, skipping",
                            filename, join_path(keys), target_lang)
                result.skipped += 1
                continue
            if not overwrite and current is not None and not current.is_empty \
                    and current.value != leaf.value:
                result.skipped += 1
                continue
            items.append((keys, leaf.value))

        log.info("%s: %d item(s) to translate, %d already done",
                 filename, len(items), result.skipped)
        if not items:
            return result

        batches = [items[i:i + self.batch_size]
                   for i in range(0, len(items), self.batch_size)]
        for batch, translations in self._run_batches(batches, target_lang):
            for (keys, source), translation in zip(batch, translations):
                if translation and translation != source:
                    set_leaf(target, keys, translation)
                    result.success += 1
                else:
                    result.failed += 1
                    log.debug("Translation failed: %s", join_path(keys))

        ws.write_tree(target_path, target)
        log.info("%s: %d translated, %d failed (%.1f%%)", filename,
                 result.success, result.failed, result.success_rate)
        return result

    def _run_batches(self, batches: list, target_lang: str) -> list:
        """Run batches ``max_concurrent`` at a time, pausing between waves."""
        results = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_concurrent) as pool:
            for start in range(0, len(batches), self.max_concurrent):
                wave = batches[start:start + self.max_concurrent]
                futures = [pool.submit(self.context.translate_batch,
                                       [text for _, text in batch], target_lang)
                           for batch in wave]
                for batch, future in zip(wave, futures):
                    results.append((batch, future.result()))
                if start + self.max_concurrent < len(batches) and self.delay_ms:
                    time.sleep(self.delay_ms / 1000)
        return results

    def translate_language(self, target_lang: str,
                           files: Optional[list] = None,
                           overwrite: bool = False) -> TranslationRunResult:
        """Translate every baseline file (or just ``files``) into a language."""
        ws = self.workspace
        if target_lang == ws.base_language:
            raise LocalizerError("Cannot translate the base language")
        if not ws.language_exists(target_lang):
            raise NotFoundError(f"Language folder not found: {target_lang}")

        filenames = files or ws.list_files(ws.base_language)
        run = TranslationRunResult(target_lang)
        started = time.monotonic()
        log.info("Translating %d file(s) to %s (engine: %s, batch size %d, concurrency %d)",
                 len(filenames), target_lang, self.context.engine.value,
                 self.batch_size, self.max_concurrent)
        for i, filename in enumerate(filenames, 1):
            log.info("[%d/%d] %s", i, len(filenames), filename)
            try:
                run.files.append(self.translate_file(filename, target_lang, overwrite))
            except (LocalizerError, OSError) as e:
                log.error("Translating %s failed: %s", filename, e)
                run.errors.append(f"{filename}: {e}")
        run.duration = time.monotonic() - started
        log.info("Finished %s in %.1fs", target_lang, run.duration)
        return run
