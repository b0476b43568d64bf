"""
Translation Manager Module

Main TranslationManager class that coordinates the translation workflow for
every (source file, target language) pair:
- Read and parse the source document
- Diff against the previously generated target (keyed formats)
- Translate pending units through the Langbly client
- Merge and write the output file
- Aggregate file and character totals
"""

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from langbly_sync import language_codes as lc
from langbly_sync.client.service import TranslationClient
from langbly_sync.config import (
    DEFAULT_MAX_BATCH_CHARS,
    DEFAULT_MAX_BATCH_ITEMS,
    PipelineConfig,
    load_config,
)
from langbly_sync.exceptions import (
    DocumentError,
    PipelineCancelled,
    PipelineError,
    TranslationError,
)
from langbly_sync.formats import (
    detect_indent,
    dump_json,
    dump_yaml,
    flatten,
    parse_json,
    parse_yaml,
    split_markdown,
    assemble_markdown,
)
from langbly_sync.logger import get_logger, set_log_mode
from langbly_sync.project.generator import (
    FileGenerationError,
    default_source_root,
    detect_format,
    read_existing_file,
    resolve_output_path,
    write_file_atomic,
)
from langbly_sync.translation.batching import count_characters
from langbly_sync.translation.diff import compute_diff, merge_translations
from langbly_sync.translation.processor import translate_entries_with_placeholders
from langbly_sync.translation.progress import TranslationProgress

logger = get_logger(__name__)

ProgressCallback = Callable[[TranslationProgress], None]


class KeyedFormat(NamedTuple):
    """Parse/dump pair for a key-value locale format."""
    name: str
    parse: Callable[[str, str], Dict[str, Any]]
    dump: Callable[[Dict[str, Any], str], str]


KEYED_FORMATS = {
    "json": KeyedFormat("json", parse_json, lambda doc, source: dump_json(doc, detect_indent(source))),
    "yaml": KeyedFormat("yaml", parse_yaml, lambda doc, source: dump_yaml(doc)),
}


@dataclass
class PairResult:
    """Totals contributed by one (file, language) pair."""
    files: int = 0
    chars: int = 0


@dataclass
class TranslateResult:
    """Outcome of a translate_files run."""
    files_translated: int = 0
    characters_used: int = 0
    failed_items: List[Dict[str, Any]] = field(default_factory=list)
    cancelled: bool = False
    elapsed_time: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failed_items and not self.cancelled

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["success"] = self.success
        return payload


@dataclass
class _Pair:
    index: int
    source_file: str
    file_format: str
    language: str
    output_path: str


class TranslationManager:
    """
    Runs the incremental translation pipeline.

    Features:
    - JSON/YAML: only keys missing from the existing target are translated,
      manual edits in the target are kept
    - Markdown: the whole body is retranslated on every run
    - Placeholder protection for keyed entries
    - Optional bounded worker pool across (file, language) pairs
    - Cancellation between pairs and between batches
    """

    def __init__(
        self,
        config: PipelineConfig,
        app_config: Optional[Dict[str, Any]] = None,
        client=None,
        pr_hook: Optional[Callable[[List[str]], None]] = None,
    ):
        """
        Initialize translation manager.

        Args:
            config: Options for this run
            app_config: Application config (loaded from config.json when omitted)
            client: TranslationClient; built from app_config on first use when omitted
            pr_hook: Called with the target languages when create_pr is set and files were written
        """
        config.validate()
        self.config = config
        self.app_config = app_config if app_config is not None else load_config()
        self.pr_hook = pr_hook
        self._client = client

        set_log_mode(os.environ.get("LANGBLY_LOG_MODE") or self.app_config.get("log_mode", "info"))

        translation_config = self.app_config.get("translation", {})
        self.max_batch_items = int(translation_config.get("max_batch_items", DEFAULT_MAX_BATCH_ITEMS))
        self.max_batch_chars = int(translation_config.get("max_batch_chars", DEFAULT_MAX_BATCH_CHARS))
        self.max_workers = max(1, int(translation_config.get("max_workers", 1)))
        self.fail_fast = bool(translation_config.get("fail_fast", True))

    @property
    def client(self):
        """Translation client, created lazily so dry runs never need an API key."""
        if self._client is None:
            self._client = TranslationClient.from_config(self.app_config)
        return self._client

    def _build_pairs(self, languages: List[str]) -> List[_Pair]:
        source_root = self.config.source_root or default_source_root(self.config.files)
        pairs = []
        for source_file in self.config.files:
            file_format = detect_format(source_file) if self.config.format == "auto" else self.config.format
            for lang in languages:
                output_path = resolve_output_path(self.config.output_pattern, lang, source_file, source_root)
                pairs.append(_Pair(len(pairs), source_file, file_format, lang, output_path))
        return pairs

    def translate_files(
        self,
        cancel_check: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TranslateResult:
        """
        Translate every source file into every target language.

        Args:
            cancel_check: Optional function polled between pairs and batches
            progress_callback: Optional callback for progress updates

        Returns:
            TranslateResult with files written and characters submitted

        Raises:
            PipelineError: First failing pair, when fail_fast is enabled
        """
        start_time = time.time()
        result = TranslateResult()
        languages = lc.resolve_target_languages(self.config.target_languages, self.config.source_language)

        if not languages:
            logger.warning("No target languages left after removing the source language")
            return result
        if not self.config.files:
            logger.warning("No source files to translate")
            return result

        pairs = self._build_pairs(languages)
        logger.info(f"Found {len(self.config.files)} source file(s)")
        logger.info(f"Target languages: {', '.join(lc.display_name(lang) for lang in languages)}")
        if self.config.dry_run:
            logger.info("[dry-run mode] No files will be written")

        abort = threading.Event()
        first_error: Optional[PipelineError] = None
        partials: List[PairResult] = []

        def should_stop() -> bool:
            return abort.is_set() or bool(cancel_check and cancel_check())

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="langbly-pair") as executor:
            futures = [
                executor.submit(self._run_pair, pair, len(pairs), should_stop, abort, progress_callback)
                for pair in pairs
            ]
            for future in as_completed(futures):
                try:
                    partials.append(future.result())
                except PipelineCancelled:
                    if not abort.is_set():
                        result.cancelled = True
                except PipelineError as e:
                    logger.error(f"✗ {e}")
                    if self.fail_fast:
                        if first_error is None:
                            first_error = e
                    else:
                        result.failed_items.append(e.details)

        if first_error is not None:
            raise first_error

        # Per-pair totals are only combined here, on the calling thread
        result.files_translated = sum(p.files for p in partials)
        result.characters_used = sum(p.chars for p in partials)
        result.elapsed_time = time.time() - start_time

        logger.info(
            "Translation %s in %.1f seconds: %d files translated, %d characters used%s",
            "cancelled" if result.cancelled else "completed",
            result.elapsed_time,
            result.files_translated,
            result.characters_used,
            f", {len(result.failed_items)} failed" if result.failed_items else "",
        )

        self._maybe_create_pr(languages, result)
        return result

    def _maybe_create_pr(self, languages: List[str], result: TranslateResult) -> None:
        if not self.config.create_pr or self.config.dry_run or result.files_translated == 0:
            return
        if self.pr_hook is None:
            logger.warning("Pull request creation requested but no pull request hook is configured")
            return
        self.pr_hook(languages)

    def _run_pair(
        self,
        pair: _Pair,
        total_pairs: int,
        should_stop: Callable[[], bool],
        abort: threading.Event,
        progress_callback: Optional[ProgressCallback],
    ) -> PairResult:
        if should_stop():
            raise PipelineCancelled()
        try:
            return self.translate_pair(pair, total_pairs, should_stop, progress_callback)
        except PipelineCancelled:
            raise
        except (TranslationError, FileGenerationError, OSError) as e:
            # Stop pairs that have not started yet before the error reaches the caller
            if self.fail_fast:
                abort.set()
            raise PipelineError(pair.source_file, pair.language, e) from e

    def translate_pair(
        self,
        pair: _Pair,
        total_pairs: int = 1,
        cancel_check: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> PairResult:
        """Run the format-specific sub-pipeline for one (file, language) pair."""
        def report(phase: str, **kwargs) -> None:
            if progress_callback:
                progress_callback(TranslationProgress(
                    source_file=pair.source_file,
                    language=pair.language,
                    language_name=lc.get_language_name(pair.language) or pair.language,
                    total_pairs=total_pairs,
                    completed_pairs=pair.index,
                    phase=phase,
                    **kwargs,
                ))

        logger.info(f"Processing {pair.source_file} ({pair.file_format}) -> {pair.language}")
        report("checking")

        if pair.file_format == "markdown":
            return self._translate_markdown_file(pair, report)
        if pair.file_format in KEYED_FORMATS:
            return self._translate_keyed_file(pair, KEYED_FORMATS[pair.file_format], cancel_check, report)
        raise DocumentError(f"Unsupported format '{pair.file_format}'", path=pair.source_file)

    @staticmethod
    def _read_source(source_file: str) -> str:
        try:
            return Path(source_file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentError(f"Cannot read source file {source_file}: {e}", path=source_file) from e

    @staticmethod
    def _load_existing_target(output_path: str, handler: KeyedFormat) -> Optional[Dict[str, Any]]:
        """Existing target document; None when absent or unparseable."""
        content = read_existing_file(Path(output_path))
        if content is None:
            return None
        try:
            return handler.parse(content, output_path)
        except DocumentError as e:
            logger.warning(f"Existing target {output_path} could not be parsed, translating everything: {e}")
            return None

    def _translate_keyed_file(
        self,
        pair: _Pair,
        handler: KeyedFormat,
        cancel_check: Optional[Callable[[], bool]],
        report: Callable[..., None],
    ) -> PairResult:
        lang = pair.language
        source_content = self._read_source(pair.source_file)
        source_doc = handler.parse(source_content, pair.source_file)
        source_entries = flatten(source_doc)

        if not source_entries:
            logger.info(f"  {lang}: No translatable strings found, skipping")
            report("skipped")
            return PairResult()

        existing_target = self._load_existing_target(pair.output_path, handler)
        to_translate = compute_diff(source_entries, existing_target)

        if not to_translate:
            logger.info(f"  {lang}: All keys already translated, skipping")
            report("skipped", total_keys=len(source_entries))
            return PairResult()

        chars = count_characters([entry.value for entry in to_translate])
        logger.info(f"  {lang}: {len(to_translate)} keys to translate ({len(source_entries)} total)")

        if self.config.dry_run:
            logger.info(f"  {lang}: [dry-run] Would write to {pair.output_path}")
            report("dry_run", total_keys=len(source_entries), pending_keys=len(to_translate), characters=chars)
            return PairResult(0, chars)

        def on_batch_done(batch_number: int, total_batches: int, batch_size: int) -> None:
            report(
                "batch_done",
                current_batch=batch_number,
                total_batches=total_batches,
                batch_items_count=batch_size,
                total_keys=len(source_entries),
                pending_keys=len(to_translate),
            )

        translated = translate_entries_with_placeholders(
            self.client,
            to_translate,
            self.config.source_language,
            lang,
            max_items=self.max_batch_items,
            max_chars=self.max_batch_chars,
            cancel_check=cancel_check,
            on_batch_done=on_batch_done,
        )

        merged = merge_translations(source_entries, translated, existing_target, source_doc=source_doc)
        write_file_atomic(Path(pair.output_path), handler.dump(merged, source_content))
        logger.info(f"  {lang}: Wrote {pair.output_path}")
        report("written", total_keys=len(source_entries), pending_keys=len(to_translate), characters=chars)

        return PairResult(1, chars)

    def _translate_markdown_file(self, pair: _Pair, report: Callable[..., None]) -> PairResult:
        """
        Translate a Markdown body as one HTML-format request.

        There is no per-unit key model, so the body is retranslated on every
        run, and placeholders are not masked on this path.
        """
        lang = pair.language
        source_content = self._read_source(pair.source_file)
        document = split_markdown(source_content)

        if not document.body.strip():
            logger.info(f"  {lang}: Empty body, skipping")
            report("skipped")
            return PairResult()

        chars = len(document.body)
        logger.info(f"  {lang}: Translating markdown ({chars} chars)")

        if self.config.dry_run:
            logger.info(f"  {lang}: [dry-run] Would write to {pair.output_path}")
            report("dry_run", characters=chars)
            return PairResult(0, chars)

        translation = self.client.translate_one(
            document.body,
            lang,
            source=self.config.source_language,
            fmt="html",
        )
        write_file_atomic(Path(pair.output_path), assemble_markdown(document.frontmatter, translation.text))
        logger.info(f"  {lang}: Wrote {pair.output_path}")
        report("written", characters=chars)

        return PairResult(1, chars)
