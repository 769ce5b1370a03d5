"""Conformance runner for styleguard: scan, check, fix and report."""
from __future__ import annotations

import difflib
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from styleguard.constants import OutputFormat
from styleguard.diagnostics import DiagnosticCollection, FileReport
from styleguard.engine import check_parsed, failure_report, parse_error_report
from styleguard.fixer import FixOutcome, fix_source
from styleguard.formatters import Formatter, format_summary, get_formatter
from styleguard.parser import ParseResult, parse_file
from styleguard.rules.base import Rule
from styleguard.rules.registry import get_enabled_rules
from styleguard.scanner import scan_files
from styleguard.types import StyleGuardConfig

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileResult:
    """Outcome for one file. ``fixed`` is only set when fixing was requested."""

    file: Path
    report: FileReport
    parse_failed: bool
    original: str | None = None
    fixed: str | None = None
    iterations: int = 0

    @property
    def changed(self) -> bool:
        return self.fixed is not None and self.fixed != self.original


@dataclass(frozen=True, slots=True)
class RunResult:
    files: tuple[FileResult, ...]
    diagnostics: DiagnosticCollection
    exit_code: int

    @property
    def files_checked(self) -> int:
        return len(self.files)

    @property
    def files_changed(self) -> int:
        return sum(1 for f in self.files if f.changed)

    @property
    def reports(self) -> tuple[FileReport, ...]:
        return tuple(f.report for f in self.files)


def process_file(
    *,
    file: Path,
    config: StyleGuardConfig,
    rules: list[Rule],
    fix: bool = False,
    write: bool = False,
) -> FileResult:
    """Check (and optionally fix) a single file in isolation."""
    logger.debug("Checking %s", file)
    parse_result: ParseResult = parse_file(file=file)
    if parse_result.parse_error is not None:
        logger.debug("%s: parse error: %s", file, parse_result.parse_error.message)
        return FileResult(
            file=file,
            report=parse_error_report(parse_result=parse_result),
            parse_failed=True,
        )

    if not fix:
        report: FileReport
        report, _ = check_parsed(parse_result=parse_result, rules=rules, config=config)
        logger.debug("%s: %d diagnostics", file, len(report))
        return FileResult(
            file=file,
            report=report,
            parse_failed=False,
            original=parse_result.source,
        )

    outcome: FixOutcome = fix_source(
        file=file,
        source=parse_result.source,
        language=parse_result.language,
        rules=rules,
        config=config,
    )
    logger.debug(
        "%s: %d diagnostics after %d fix iterations",
        file, len(outcome.report), outcome.iterations,
    )
    if write and outcome.source != parse_result.source:
        try:
            file.write_bytes(outcome.source.encode("utf-8"))
        except OSError as e:
            logger.error("Cannot write %s: %s", file, e)
        else:
            logger.info("Wrote %s", file)

    return FileResult(
        file=file,
        report=outcome.report,
        parse_failed=False,
        original=parse_result.source,
        fixed=outcome.source,
        iterations=outcome.iterations,
    )


def lint_paths(
    *,
    paths: tuple[Path, ...],
    config: StyleGuardConfig,
    fix: bool = False,
    write: bool = False,
    cancel: threading.Event | None = None,
) -> RunResult:
    """Check every matching file under ``paths`` on a bounded thread pool.

    Setting ``cancel`` stops files that have not started yet; files already
    running finish, so none is left half-written.
    """
    started: float = time.perf_counter()
    files: list[Path] = scan_files(paths=paths, config=config)
    logger.info("Found %d files", len(files))
    rules: list[Rule] = get_enabled_rules(config=config)
    stop: threading.Event = cancel if cancel is not None else threading.Event()

    def run_one(file: Path) -> FileResult | None:
        if stop.is_set():
            return None
        try:
            return process_file(file=file, config=config, rules=rules, fix=fix, write=write)
        except Exception as e:
            logger.warning("%s: processing failed: %s", file, e)
            logger.debug("Traceback for %s", file, exc_info=True)
            return FileResult(
                file=file,
                report=failure_report(file=file, message=f"Processing failed: {e!r}"),
                parse_failed=False,
            )

    results: dict[Path, FileResult] = {}
    executor: ThreadPoolExecutor = ThreadPoolExecutor(max_workers=config.jobs)
    try:
        futures: dict[Future[FileResult | None], Path] = {
            executor.submit(run_one, file): file for file in files
        }
        for future in as_completed(futures):
            result: FileResult | None = future.result()
            if result is not None:
                results[futures[future]] = result
    except KeyboardInterrupt:
        stop.set()
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    finally:
        executor.shutdown(wait=True)

    if len(results) < len(files):
        logger.info("Cancelled, skipped %d files", len(files) - len(results))

    ordered: tuple[FileResult, ...] = tuple(results[f] for f in sorted(results))
    collection: DiagnosticCollection = DiagnosticCollection()
    for file_result in ordered:
        collection.add_all(violations=file_result.report)

    exit_code: int = 1 if collection.has_errors else 0
    if ordered and all(f.parse_failed for f in ordered):
        exit_code = 2

    logger.info("Completed in %.2fs", time.perf_counter() - started)
    return RunResult(files=ordered, diagnostics=collection, exit_code=exit_code)


def format_results(*, result: RunResult, config: StyleGuardConfig) -> str:
    formatter: Formatter = get_formatter(output_format=config.output_format)
    output: str = formatter.format(reports=result.reports)
    if config.output_format == OutputFormat.JSON:
        return output

    summary: str = format_summary(diagnostics=result.diagnostics)
    suffix: str = "s" if result.files_checked != 1 else ""
    file_count: str = f"Checked {result.files_checked} file{suffix}."

    parts: list[str] = []
    if output:
        parts.append(output)
    parts.append(summary)
    parts.append(file_count)

    return "\n".join(parts)


def format_diff(*, path: Path, old: str, new: str) -> str:
    """Unified diff between the original and fixed text of a file."""
    return "".join(
        difflib.unified_diff(
            old.splitlines(keepends=True),
            new.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )
