"""Text extraction for the supported document formats."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from doc_agent.types import DocumentTypeInfo, ExtractedText

DOCUMENT_TYPES: dict[str, str] = {
    ".txt": "txt",
    ".md": "markdown",
    ".json": "json",
    ".csv": "csv",
    ".html": "html",
    ".htm": "html",
    ".pdf": "pdf",
}

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE | re.DOTALL)
_HTML_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")
_LINE_BREAK = re.compile(r"\r?\n")


class PdfExtractionError(Exception):
    """Raised when a PDF cannot be parsed into text."""


class Extractor(ABC):
    """Turns raw file content into readable text."""

    extensions: tuple[str, ...] = ()

    @abstractmethod
    def extract(self, path: Path) -> str:
        """Return readable text for the file at `path`."""

    def metadata(self) -> dict[str, object]:
        return {}


class PlainTextExtractor(Extractor):
    """Fallback for text, markdown and unknown extensions."""

    extensions = (".txt", ".md")

    def extract(self, path: Path) -> str:
        return read_document_text(path)


class JsonExtractor(Extractor):
    """Pretty-prints valid JSON and leaves invalid JSON as-is."""

    extensions = (".json",)

    def extract(self, path: Path) -> str:
        raw = read_document_text(path)
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            return raw
        return json.dumps(payload, ensure_ascii=False, indent=2)


class CsvExtractor(Extractor):
    extensions = (".csv",)

    def extract(self, path: Path) -> str:
        raw = read_document_text(path)
        rows = len(_LINE_BREAK.split(raw))
        return f"CSV rows: {rows}\n\n{raw}"


class HtmlExtractor(Extractor):
    extensions = (".html", ".htm")

    def extract(self, path: Path) -> str:
        return html_to_text(read_document_text(path))


class PdfExtractor(Extractor):
    """Parses PDF pages with pypdf and joins their text."""

    extensions = (".pdf",)

    def extract(self, path: Path) -> str:
        try:
            reader = PdfReader(path)
            pages = [page.extract_text() or "" for page in reader.pages]
        except OSError as exc:
            # Keep the resolved absolute path out of the message.
            raise PdfExtractionError(exc.strerror or exc.__class__.__name__) from exc
        except (PyPdfError, ValueError, KeyError) as exc:
            raise PdfExtractionError(str(exc)) from exc
        return "\n".join(pages)

    def metadata(self) -> dict[str, object]:
        return {"is_pdf": True}


class ExtractorRegistry:
    """Maps file extension to extractor implementation."""

    def __init__(
        self,
        extractors: list[Extractor] | None = None,
        *,
        fallback: Extractor | None = None,
    ) -> None:
        self._extractors: dict[str, Extractor] = {}
        self._fallback = fallback or PlainTextExtractor()
        for extractor in extractors or [
            PlainTextExtractor(),
            JsonExtractor(),
            CsvExtractor(),
            HtmlExtractor(),
            PdfExtractor(),
        ]:
            self.register(extractor)

    def register(self, extractor: Extractor) -> None:
        for extension in extractor.extensions:
            self._extractors[extension.lower()] = extractor

    def for_path(self, path: str | Path) -> Extractor:
        return self._extractors.get(Path(path).suffix.lower(), self._fallback)

    def extract_path(self, path: str | Path, *, display_path: str | None = None) -> ExtractedText:
        file_path = Path(path)
        extractor = self.for_path(file_path)
        text = extractor.extract(file_path)
        return ExtractedText(
            file_path=display_path or str(path),
            extracted_text=text,
            word_count=count_words(text),
            metadata=extractor.metadata(),
        )


def detect_document_type(path: str | Path, *, display_path: str | None = None) -> DocumentTypeInfo:
    """Label a file by extension and report its size and modification time."""

    file_path = Path(path)
    stats = file_path.stat()
    extension = file_path.suffix.lower()
    return DocumentTypeInfo(
        file_path=display_path or str(path),
        type=DOCUMENT_TYPES.get(extension, "unknown"),
        extension=extension,
        size_bytes=stats.st_size,
        last_modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc).isoformat(),
    )


def html_to_text(markup: str) -> str:
    """Drop script blocks and tags, then collapse whitespace."""
    without_scripts = _SCRIPT_BLOCK.sub("", markup)
    without_tags = _HTML_TAG.sub(" ", without_scripts)
    return _WHITESPACE.sub(" ", without_tags).strip()


def read_document_text(path: Path) -> str:
    """Decode a file as UTF-8 with line endings left untouched.

    Undecodable bytes become U+FFFD instead of failing the read.
    """
    return path.read_bytes().decode("utf-8", errors="replace")


def count_words(text: str) -> int:
    return len(text.split())
