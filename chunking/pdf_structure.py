"""
Structural Extractor - linearizes a layout analysis result

Layout services return one flat content buffer with overlapping structural
metadata (pages, paragraph roles, tables) addressed by character offsets.
This module sweeps each page's offsets left to right and rebuilds a single
reading-order text stream:

- Paragraphs with a known role get <h1>/<h2> markup spliced in at their
  start and end offsets
- The characters covered by a table are replaced by the table rendered as
  HTML, emitted once at the first covered offset
- Each page is followed by one space

Usage:
    from chunking.pdf_structure import extract_layout_text

    text = extract_layout_text(layout_result)
"""

import html
import logging

from layout.models import CellKind, LayoutResult, LayoutTable

logger = logging.getLogger(__name__)

PDF_HEADERS = {
    "title": "h1",
    "sectionHeading": "h2",
}

_HEADER_CELL_KINDS = {CellKind.COLUMN_HEADER.value, CellKind.ROW_HEADER.value}

NO_TABLE = -1


def table_to_html(table: LayoutTable) -> str:
    """
    Render a table as HTML.

    Rows follow row_index, cells within a row follow column_index, no matter
    in which order the layout service listed them.
    """
    parts = ["<table>"]
    for row_index in range(table.row_count):
        row_cells = sorted(
            (cell for cell in table.cells if cell.row_index == row_index),
            key=lambda cell: cell.column_index,
        )
        parts.append("<tr>")
        for cell in row_cells:
            tag = "th" if cell.kind in _HEADER_CELL_KINDS else "td"
            cell_spans = ""
            if cell.column_span > 1:
                cell_spans += f" colSpan={cell.column_span}"
            if cell.row_span > 1:
                cell_spans += f" rowSpan={cell.row_span}"
            parts.append(f"<{tag}{cell_spans}>{html.escape(cell.content)}</{tag}>")
        parts.append("</tr>")
    parts.append("</table>")
    return "".join(parts)


def _role_boundaries(result: LayoutResult) -> tuple[dict[int, str], dict[int, str]]:
    roles_start: dict[int, str] = {}
    roles_end: dict[int, str] = {}
    for paragraph in result.paragraphs:
        if paragraph.role and paragraph.spans:
            roles_start[paragraph.start_offset] = paragraph.role
            roles_end[paragraph.end_offset] = paragraph.role
    return roles_start, roles_end


def _table_map(tables: list[LayoutTable], page_offset: int, page_length: int) -> list[int]:
    # Later tables overwrite earlier ones where spans collide.
    table_chars = [NO_TABLE] * page_length
    for table_id, table in enumerate(tables):
        for span in table.spans:
            for i in range(span.length):
                idx = span.offset - page_offset + i
                if 0 <= idx < page_length:
                    table_chars[idx] = table_id
    return table_chars


def extract_page_texts(result: LayoutResult) -> list[str]:
    """Return the reconstructed text of every page, in page order."""
    roles_start, roles_end = _role_boundaries(result)
    content = result.content
    page_texts: list[str] = []

    for page_index, page in enumerate(result.pages):
        tables_on_page = result.tables_on_page(page_index + 1)
        page_offset = page.offset
        page_length = page.length
        table_chars = _table_map(tables_on_page, page_offset, page_length)

        parts: list[str] = []
        added_tables: set[int] = set()
        for idx, table_id in enumerate(table_chars):
            if table_id == NO_TABLE:
                position = page_offset + idx
                if position >= len(content):
                    break
                role = roles_start.get(position)
                if role in PDF_HEADERS:
                    parts.append(f"<{PDF_HEADERS[role]}>")
                role = roles_end.get(position)
                if role in PDF_HEADERS:
                    parts.append(f"</{PDF_HEADERS[role]}>")
                parts.append(content[position])
            elif table_id not in added_tables:
                parts.append(table_to_html(tables_on_page[table_id]))
                added_tables.add(table_id)

        parts.append(" ")
        page_texts.append("".join(parts))

    logger.debug(
        "Reconstructed %d pages with %d tables", len(page_texts), len(result.tables)
    )
    return page_texts


def extract_layout_text(result: LayoutResult) -> str:
    """Linearize a layout result into one text with heading/table markup."""
    return "".join(extract_page_texts(result))
