"""Source parsing with per-file error isolation for styleguard."""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from styleguard.adapters.css import parse_css, parse_scss
from styleguard.adapters.python import parse_python
from styleguard.constants import LANGUAGE_BY_SUFFIX, Language
from styleguard.syntax import Node, SourceLocation, SourceText
from styleguard.types import ParseError

_ADAPTERS: Final[dict[Language, Callable[[str], Node]]] = {
    Language.CSS: parse_css,
    Language.SCSS: parse_scss,
    Language.PYTHON: parse_python,
}


@dataclass(frozen=True, slots=True)
class ParseErrorInfo:
    """Parse error details. Line/column are 1-based."""

    offset: int
    location: SourceLocation
    message: str
    source_line: str | None


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Result of parsing one source file."""

    file: Path
    language: Language
    text: SourceText
    tree: Node | None
    parse_error: ParseErrorInfo | None

    @property
    def source(self) -> str:
        return self.text.text


def language_for(file: Path) -> Language | None:
    """Map a file suffix to its language, or None if unsupported."""
    return LANGUAGE_BY_SUFFIX.get(file.suffix.lower())


def parse_source(*, file: Path, source: str, language: Language) -> ParseResult:
    """Parse already-decoded source, returning a tree or a parse error."""
    text: SourceText = SourceText(source)
    try:
        tree: Node = _ADAPTERS[language](source)
    except ParseError as e:
        return _failed(file=file, language=language, text=text, offset=e.offset, message=e.message)
    except RecursionError:
        # Nesting deeper than the interpreter stack.
        return _failed(
            file=file,
            language=language,
            text=text,
            offset=0,
            message="Source is nested too deeply to parse",
        )

    return ParseResult(
        file=file,
        language=language,
        text=text,
        tree=tree,
        parse_error=None,
    )


def parse_file(*, file: Path, language: Language | None = None) -> ParseResult:
    """Read and parse a file; unreadable files become parse errors."""
    resolved: Language | None = language or language_for(file)
    if resolved is None:
        raise ValueError(f"Unsupported file type: {file}")

    try:
        source: str = file.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        return _unreadable(file=file, language=resolved, message=f"Encoding error: {e}")
    except OSError as e:
        return _unreadable(file=file, language=resolved, message=f"Cannot read file: {e}")

    return parse_source(file=file, source=source, language=resolved)


def _unreadable(*, file: Path, language: Language, message: str) -> ParseResult:
    return ParseResult(
        file=file,
        language=language,
        text=SourceText(""),
        tree=None,
        parse_error=ParseErrorInfo(
            offset=0,
            location=SourceLocation(line=1, column=1),
            message=message,
            source_line=None,
        ),
    )


def _failed(
    *,
    file: Path,
    language: Language,
    text: SourceText,
    offset: int,
    message: str,
) -> ParseResult:
    clamped: int = min(max(offset, 0), len(text))
    location: SourceLocation = text.location(clamped)
    return ParseResult(
        file=file,
        language=language,
        text=text,
        tree=None,
        parse_error=ParseErrorInfo(
            offset=clamped,
            location=location,
            message=message,
            source_line=text.line_text(location.line),
        ),
    )
