"""
Layout Analyzer - PDF layout analysis with PyMuPDF

Produces a LayoutResult (flat content + offset-addressed pages, paragraphs
and tables) from raw document bytes, the shape the structural extractor in
chunking.pdf_structure consumes.

Modes:
- READ: text blocks in reading order, no roles, no tables
- LAYOUT: additionally detects tables (page.find_tables) and marks
  headings by font size relative to the document's body text

Heuristics (LAYOUT mode):
- Body size = most frequent span font size in the document
- The first block set in the document's largest font is the "title",
  provided that font is at least TITLE_RATIO x body size
- Other short blocks at least HEADING_RATIO x body size are "sectionHeading"
- Text blocks lying inside a detected table are replaced by the table

Usage:
    from layout import PyMuPDFLayoutAnalyzer

    analyzer = PyMuPDFLayoutAnalyzer()
    result = analyzer.analyze(pdf_bytes, mode="layout")
"""

import logging
from collections import Counter
from typing import Optional, Protocol, Union, runtime_checkable

import fitz  # PyMuPDF

from .models import (
    AnalysisMode,
    BoundingRegion,
    CellKind,
    LayoutPage,
    LayoutParagraph,
    LayoutResult,
    LayoutTable,
    ParagraphRole,
    Span,
    TableCell,
)

logger = logging.getLogger(__name__)

TITLE_RATIO = 1.5
HEADING_RATIO = 1.2
MAX_HEADING_CHARS = 200

SUPPORTED_FILE_TYPES = frozenset({"pdf"})


@runtime_checkable
class LayoutAnalyzer(Protocol):
    """Anything that turns document bytes into a LayoutResult."""

    def analyze(
        self,
        data: bytes,
        mode: Union[AnalysisMode, str],
        file_type: str = "pdf",
    ) -> LayoutResult:
        ...


class _ContentBuilder:
    """Accumulates the flat content buffer and the spans pointing into it."""

    def __init__(self):
        self.parts: list[str] = []
        self.length = 0

    def append(self, text: str) -> Span:
        span = Span(offset=self.length, length=len(text))
        self.parts.append(text)
        self.length += len(text)
        return span

    def text(self) -> str:
        return "".join(self.parts)


class PyMuPDFLayoutAnalyzer:
    """
    Layout analyzer backed by PyMuPDF.

    Only PDF input is supported; DOCX and PPTX need a layout service that
    can read them and are rejected with a ValueError.
    """

    def __init__(
        self,
        title_ratio: float = TITLE_RATIO,
        heading_ratio: float = HEADING_RATIO,
    ):
        self.title_ratio = title_ratio
        self.heading_ratio = heading_ratio

    def analyze(
        self,
        data: bytes,
        mode: Union[AnalysisMode, str] = AnalysisMode.READ,
        file_type: str = "pdf",
    ) -> LayoutResult:
        """
        Analyze a document.

        Args:
            data: Raw file bytes
            mode: "layout" for headings and tables, "read" for text only
            file_type: File extension without dot

        Returns:
            LayoutResult with one page entry per document page

        Raises:
            ValueError: Unsupported file type
        """
        mode = AnalysisMode(mode)
        if file_type not in SUPPORTED_FILE_TYPES:
            raise ValueError(f"File type '{file_type}' is not supported by PyMuPDF analysis")

        with fitz.open(stream=data, filetype=file_type) as doc:
            result = self._analyze_document(doc, mode)

        logger.info(
            f"Analyzed {len(result.pages)} pages ({mode.value} mode): "
            f"{len(result.paragraphs)} paragraphs, {len(result.tables)} tables"
        )
        return result

    def _analyze_document(self, doc: fitz.Document, mode: AnalysisMode) -> LayoutResult:
        page_blocks = [self._text_blocks(page) for page in doc]
        with_layout = mode is AnalysisMode.LAYOUT
        body_size, max_size = _font_statistics(page_blocks) if with_layout else (0.0, 0.0)
        title_assigned = False

        builder = _ContentBuilder()
        pages: list[LayoutPage] = []
        paragraphs: list[LayoutParagraph] = []
        tables: list[LayoutTable] = []

        for page_index, page in enumerate(doc):
            page_number = page_index + 1
            page_start = builder.length
            found_tables = self._find_tables(page) if with_layout else []

            # (top, left, kind, payload) in reading order
            items: list[tuple[float, float, str, object]] = []
            for block in page_blocks[page_index]:
                if any(_inside(block["bbox"], table.bbox) for table in found_tables):
                    continue
                items.append((block["bbox"][1], block["bbox"][0], "text", block))
            for table in found_tables:
                items.append((table.bbox[1], table.bbox[0], "table", table))
            items.sort(key=lambda item: (item[0], item[1]))

            for _, _, kind, payload in items:
                if kind == "table":
                    tables.append(self._layout_table(payload, page_number, builder))
                    builder.append("\n")
                    continue

                text = payload["text"]
                role: Optional[str] = None
                if with_layout:
                    role = self._role(payload, text, body_size, max_size, title_assigned)
                    if role == ParagraphRole.TITLE.value:
                        title_assigned = True
                span = builder.append(text)
                paragraphs.append(LayoutParagraph(role=role, spans=[span]))
                builder.append("\n")

            pages.append(
                LayoutPage(
                    page_number=page_number,
                    spans=[Span(offset=page_start, length=builder.length - page_start)],
                )
            )

        return LayoutResult(
            content=builder.text(),
            pages=pages,
            paragraphs=paragraphs,
            tables=tables,
        )

    def _text_blocks(self, page: fitz.Page) -> list[dict]:
        blocks = []
        for block in page.get_text("dict", sort=True)["blocks"]:
            if block.get("type") != 0:
                continue
            lines = []
            sizes = []
            for line in block.get("lines", []):
                lines.append("".join(span.get("text", "") for span in line.get("spans", [])))
                sizes.extend(span.get("size", 0.0) for span in line.get("spans", []))
            text = "\n".join(lines).strip()
            if not text:
                continue
            blocks.append({
                "bbox": tuple(block["bbox"]),
                "text": text,
                "size": max(sizes) if sizes else 0.0,
                "sizes": sizes,
            })
        return blocks

    def _find_tables(self, page: fitz.Page) -> list:
        try:
            return list(page.find_tables().tables)
        except Exception as e:
            logger.warning(f"Table detection failed on page {page.number + 1}: {e}")
            return []

    def _role(
        self,
        block: dict,
        text: str,
        body_size: float,
        max_size: float,
        title_assigned: bool,
    ) -> Optional[str]:
        if body_size <= 0 or len(text) > MAX_HEADING_CHARS:
            return None
        size = block["size"]
        if (
            not title_assigned
            and size >= max_size
            and size >= body_size * self.title_ratio
        ):
            return ParagraphRole.TITLE.value
        if size >= body_size * self.heading_ratio:
            return ParagraphRole.SECTION_HEADING.value
        return None

    def _layout_table(self, table, page_number: int, builder: _ContentBuilder) -> LayoutTable:
        rows = table.extract()
        header = getattr(table, "header", None)
        header_in_table = header is not None and not getattr(header, "external", True)

        cells: list[TableCell] = []
        row_texts: list[str] = []
        for row_index, row in enumerate(rows):
            row_parts: list[str] = []
            column_index = 0
            while column_index < len(row):
                value = row[column_index]
                column_span = 1
                while (
                    column_index + column_span < len(row)
                    and row[column_index + column_span] is None
                ):
                    column_span += 1
                if value is not None:
                    content = " ".join(str(value).split())
                    row_parts.append(content)
                    kind = CellKind.COLUMN_HEADER if header_in_table and row_index == 0 else CellKind.CONTENT
                    cells.append(
                        TableCell(
                            row_index=row_index,
                            column_index=column_index,
                            column_span=column_span,
                            kind=kind.value,
                            content=content,
                        )
                    )
                column_index += column_span
            row_texts.append(" ".join(row_parts))

        span = builder.append("\n".join(row_texts))
        return LayoutTable(
            row_count=len(rows),
            column_count=max((len(row) for row in rows), default=0),
            spans=[span],
            cells=cells,
            bounding_regions=[BoundingRegion(page_number=page_number)],
        )


def _font_statistics(page_blocks: list[list[dict]]) -> tuple[float, float]:
    """Return (most frequent font size, largest font size) over all blocks."""
    sizes: Counter = Counter()
    max_size = 0.0
    for blocks in page_blocks:
        for block in blocks:
            for size in block["sizes"]:
                sizes[round(size, 1)] += 1
            max_size = max(max_size, block["size"])
    if not sizes:
        return 0.0, 0.0
    return sizes.most_common(1)[0][0], max_size


def _inside(inner: tuple, outer: tuple, tolerance: float = 1.0) -> bool:
    return (
        inner[0] >= outer[0] - tolerance
        and inner[1] >= outer[1] - tolerance
        and inner[2] <= outer[2] + tolerance
        and inner[3] <= outer[3] + tolerance
    )
