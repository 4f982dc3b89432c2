"""
Document formats, the file extension table and the format handler table.

Each chunkable format maps to a FormatHandler: the title extractor used by
its parser and the ordered separators the splitter cuts it at.

Usage:
    from chunking.formats import DocumentFormat, get_file_format, split_content

    fmt = get_file_format("docs/readme.md")   # DocumentFormat.MARKDOWN
    chunks = split_content(text, fmt, chunk_size=512, chunk_overlap=64)
"""

from enum import Enum
from pathlib import PurePath
from typing import Callable, Iterable, NamedTuple, Optional

from .cleaner import cleanup_content, extract_html_title, extract_text_title
from .splitter import CODE_SEPARATORS, MARKDOWN_SEPARATORS, TEXT_SEPARATORS, split_text
from .token_counter import TokenCounter


class DocumentFormat(str, Enum):
    """
    Content kinds the pipeline can chunk.

    PDF, DOCX and PPTX are input formats only: after layout analysis their
    content is chunked as PDF_HTML (layout mode) or TEXT (read mode).
    """

    TEXT = "text"
    HTML = "html"
    MARKDOWN = "markdown"
    CODE = "python"
    PDF = "pdf"
    DOCX = "docx"
    PPTX = "pptx"
    PDF_HTML = "html_pdf"


FILE_FORMATS: dict[str, DocumentFormat] = {
    "md": DocumentFormat.MARKDOWN,
    "txt": DocumentFormat.TEXT,
    "html": DocumentFormat.HTML,
    "shtml": DocumentFormat.HTML,
    "htm": DocumentFormat.HTML,
    "py": DocumentFormat.CODE,
    "pdf": DocumentFormat.PDF,
    "docx": DocumentFormat.DOCX,
    "pptx": DocumentFormat.PPTX,
}

# Formats that can only be read through a layout analyzer.
LAYOUT_FORMATS = frozenset({DocumentFormat.PDF, DocumentFormat.DOCX, DocumentFormat.PPTX})


def get_file_format(
    file_name: str,
    extensions_to_process: Optional[Iterable[str]] = None,
) -> Optional[DocumentFormat]:
    """
    Look up the format of a file by its extension.

    Returns None when the extension is unknown or not in
    ``extensions_to_process``.
    """
    extension = PurePath(file_name).suffix.lstrip(".")
    allowed = FILE_FORMATS.keys() if extensions_to_process is None else set(extensions_to_process)
    if extension not in allowed:
        return None
    return FILE_FORMATS.get(extension)


# =============================================================================
# FORMAT HANDLERS
# =============================================================================


class FormatHandler(NamedTuple):
    """How a format is titled and where its text may be cut."""
    extract_title: Callable[..., str]
    separators: list[str]


def _html_title(content: str, fallback: str, token_counter: Optional[TokenCounter]) -> str:
    return extract_html_title(content, fallback=fallback, token_counter=token_counter)


def _text_title(content: str, fallback: str, token_counter: Optional[TokenCounter]) -> str:
    return extract_text_title(content, fallback=fallback)


FORMAT_HANDLERS: dict[DocumentFormat, FormatHandler] = {
    DocumentFormat.TEXT: FormatHandler(_text_title, TEXT_SEPARATORS),
    DocumentFormat.MARKDOWN: FormatHandler(_text_title, MARKDOWN_SEPARATORS),
    DocumentFormat.CODE: FormatHandler(_text_title, CODE_SEPARATORS),
    DocumentFormat.HTML: FormatHandler(_html_title, TEXT_SEPARATORS),
    DocumentFormat.PDF_HTML: FormatHandler(_html_title, TEXT_SEPARATORS),
}


def get_handler(file_format: DocumentFormat) -> FormatHandler:
    """
    Return the handler of a chunkable format.

    PDF, DOCX and PPTX have no handler: they must be run through layout
    analysis first.
    """
    try:
        return FORMAT_HANDLERS[file_format]
    except KeyError:
        raise ValueError(f"No handler for format '{file_format.value}'") from None


def parse_content(
    content: str,
    file_format: DocumentFormat,
    file_name: str = "",
    token_counter: Optional[TokenCounter] = None,
) -> tuple[str, str]:
    """
    Clean ``content`` and extract its title.

    HTML keeps its markup; only whitespace is normalized.

    Returns:
        (cleaned_content, title); the title falls back to ``file_name``.
    """
    handler = get_handler(file_format)
    title = handler.extract_title(content, file_name, token_counter)
    return cleanup_content(content), title


def split_content(
    content: str,
    file_format: DocumentFormat,
    chunk_size: int,
    chunk_overlap: int = 0,
    token_counter: Optional[TokenCounter] = None,
) -> list[tuple[str, int]]:
    """Split ``content`` with the separators of its format."""
    return split_text(
        content,
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=get_handler(file_format).separators,
        token_counter=token_counter,
    )
