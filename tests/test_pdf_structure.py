"""Tests for chunking.pdf_structure — layout result linearization."""

from chunking.pdf_structure import extract_layout_text, extract_page_texts, table_to_html
from layout.models import (
    BoundingRegion,
    LayoutPage,
    LayoutParagraph,
    LayoutResult,
    LayoutTable,
    Span,
    TableCell,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _page(offset: int, length: int, number: int = 1) -> LayoutPage:
    return LayoutPage(page_number=number, spans=[Span(offset=offset, length=length)])


def _table(spans: list[tuple[int, int]], page: int = 1, label: str = "x") -> LayoutTable:
    return LayoutTable(
        row_count=2,
        column_count=2,
        spans=[Span(offset=o, length=n) for o, n in spans],
        cells=[
            TableCell(row_index=r, column_index=c, content=f"{label}{r}{c}")
            for r in range(2)
            for c in range(2)
        ],
        bounding_regions=[BoundingRegion(page_number=page)],
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestTableToHtml:
    def test_header_and_content_cells(self):
        table = LayoutTable(
            row_count=2,
            cells=[
                TableCell(row_index=1, column_index=1, content="42"),
                TableCell(row_index=0, column_index=1, kind="columnHeader", content="Age"),
                TableCell(row_index=1, column_index=0, kind="rowHeader", content="Bob"),
                TableCell(row_index=0, column_index=0, kind="columnHeader", content="Name"),
            ],
        )
        assert table_to_html(table) == (
            "<table><tr><th>Name</th><th>Age</th></tr>"
            "<tr><th>Bob</th><td>42</td></tr></table>"
        )

    def test_spans_only_when_larger_than_one(self):
        table = LayoutTable(
            row_count=1,
            cells=[TableCell(row_index=0, column_index=0, column_span=2, row_span=3, content="wide")],
        )
        assert table_to_html(table) == "<table><tr><td colSpan=2 rowSpan=3>wide</td></tr></table>"

    def test_escapes_cell_text(self):
        table = LayoutTable(
            row_count=1,
            cells=[TableCell(row_index=0, column_index=0, content="a < b & c")],
        )
        assert "<td>a &lt; b &amp; c</td>" in table_to_html(table)

    def test_empty_rows_are_kept(self):
        table = LayoutTable(row_count=2, cells=[TableCell(row_index=1, column_index=0, content="x")])
        assert table_to_html(table) == "<table><tr></tr><tr><td>x</td></tr></table>"


class TestTableReplacement:
    def test_table_replaces_its_span_once(self):
        content = "0123456789ABCDEFGHIJklmnopqrst"
        table = _table([(10, 10)], label="cell")
        result = LayoutResult(content=content, pages=[_page(0, 30)], tables=[table])

        text = extract_layout_text(result)

        assert text.count("<table>") == 1
        assert text.index("<table>") == 10
        assert "ABCDEFGHIJ" not in text
        assert text == "0123456789" + table_to_html(table) + "klmnopqrst "

    def test_non_contiguous_spans(self):
        table = _table([(2, 2), (6, 2)])
        result = LayoutResult(content="abcdefghij", pages=[_page(0, 10)], tables=[table])

        text = extract_layout_text(result)

        assert text == "ab" + table_to_html(table) + "efij "

    def test_later_table_wins_on_overlap(self):
        first = _table([(0, 4)], label="a")
        second = _table([(2, 4)], label="b")
        result = LayoutResult(content="0123456789", pages=[_page(0, 10)], tables=[first, second])

        text = extract_layout_text(result)

        assert text == table_to_html(first) + table_to_html(second) + "6789 "

    def test_table_bound_to_other_page_is_ignored(self):
        table = _table([(0, 4)], page=2)
        result = LayoutResult(content="abcdefgh", pages=[_page(0, 4), _page(4, 4, 2)], tables=[table])

        pages = extract_page_texts(result)

        # Offsets are absolute, so the table does not cover page 2's characters.
        assert pages[0] == "abcd "
        assert pages[1] == "efgh "


class TestHeadingMarkup:
    def test_roles_become_headings(self):
        content = "Title\nBody text\nSection\nmore"
        result = LayoutResult(
            content=content,
            pages=[_page(0, len(content))],
            paragraphs=[
                LayoutParagraph(role="title", spans=[Span(offset=0, length=5)]),
                LayoutParagraph(spans=[Span(offset=6, length=9)]),
                LayoutParagraph(role="sectionHeading", spans=[Span(offset=16, length=7)]),
            ],
        )
        assert extract_layout_text(result) == "<h1>Title</h1>\nBody text\n<h2>Section</h2>\nmore "

    def test_other_roles_ignored(self):
        content = "Page 3\nText"
        result = LayoutResult(
            content=content,
            pages=[_page(0, len(content))],
            paragraphs=[LayoutParagraph(role="pageNumber", spans=[Span(offset=0, length=6)])],
        )
        assert extract_layout_text(result) == "Page 3\nText "

    def test_report_layout(self, report_layout):
        text = extract_layout_text(report_layout)

        assert text.startswith("<h1>Annual Report</h1>\n")
        assert "<h2>Results</h2>" in text
        assert "<th>Region</th><th>Value</th>" in text
        assert "North 10" not in text
        assert text.endswith("The table above lists the results per region.\n ")


class TestPages:
    def test_space_after_each_page(self):
        content = "Page one.Page two."
        result = LayoutResult(content=content, pages=[_page(0, 9), _page(9, 9, 2)])
        assert extract_layout_text(result) == "Page one. Page two. "

    def test_page_running_past_content(self):
        result = LayoutResult(content="short", pages=[_page(0, 50)])
        assert extract_layout_text(result) == "short "

    def test_no_pages(self):
        assert extract_layout_text(LayoutResult(content="orphan text")) == ""
