"""Tests for layout.analyzer — PyMuPDF layout analysis."""

from types import SimpleNamespace

import fitz
import pytest

from chunking.pdf_structure import extract_layout_text, table_to_html
from layout.analyzer import LayoutAnalyzer, PyMuPDFLayoutAnalyzer, _ContentBuilder
from layout.models import AnalysisMode


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

BODY_LINES = [
    "Revenue grew strongly this year across all regions.",
    "Costs stayed flat while headcount increased slightly.",
    "The board approved the budget for the coming year.",
]


@pytest.fixture
def report_pdf() -> bytes:
    """One page: a large title, body text and a medium-sized heading."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Annual Report", fontsize=24)
    for i, line in enumerate(BODY_LINES):
        page.insert_text((72, 200 + i * 16), line, fontsize=11)
    page.insert_text((72, 320), "Outlook", fontsize=14)
    page.insert_text((72, 400), "Growth is expected to continue next year.", fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def two_page_pdf() -> bytes:
    doc = fitz.open()
    for number in (1, 2):
        page = doc.new_page()
        page.insert_text((72, 100), f"Text on page {number}.", fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def analyzer():
    return PyMuPDFLayoutAnalyzer()


def _span_text(result, span) -> str:
    return result.content[span.offset:span.end]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestProtocol:
    def test_analyzer_satisfies_protocol(self, analyzer):
        assert isinstance(analyzer, LayoutAnalyzer)

    def test_unsupported_file_type(self, analyzer):
        with pytest.raises(ValueError, match="docx"):
            analyzer.analyze(b"PK", AnalysisMode.READ, "docx")

    def test_invalid_mode(self, analyzer, report_pdf):
        with pytest.raises(ValueError):
            analyzer.analyze(report_pdf, "scan")


class TestReadMode:
    def test_text_without_roles(self, analyzer, report_pdf):
        result = analyzer.analyze(report_pdf, AnalysisMode.READ)

        assert len(result.pages) == 1
        assert result.tables == []
        assert all(p.role is None for p in result.paragraphs)
        assert "Annual Report" in result.content
        for line in BODY_LINES:
            assert line in result.content

    def test_mode_as_string(self, analyzer, report_pdf):
        result = analyzer.analyze(report_pdf, "read")
        assert result.content.startswith("Annual Report")

    def test_paragraph_spans_point_into_content(self, analyzer, report_pdf):
        result = analyzer.analyze(report_pdf, AnalysisMode.READ)
        texts = [_span_text(result, p.spans[0]) for p in result.paragraphs]
        assert texts[0] == "Annual Report"
        assert texts[-1] == "Growth is expected to continue next year."

    def test_page_spans(self, analyzer, two_page_pdf):
        result = analyzer.analyze(two_page_pdf, AnalysisMode.READ)

        assert [p.page_number for p in result.pages] == [1, 2]
        assert _span_text(result, result.pages[0].spans[0]) == "Text on page 1.\n"
        assert _span_text(result, result.pages[1].spans[0]) == "Text on page 2.\n"
        assert extract_layout_text(result) == "Text on page 1.\n Text on page 2.\n "


class TestLayoutMode:
    def test_roles(self, analyzer, report_pdf):
        result = analyzer.analyze(report_pdf, AnalysisMode.LAYOUT)

        roles = {_span_text(result, p.spans[0]): p.role for p in result.paragraphs}
        assert roles["Annual Report"] == "title"
        assert roles["Outlook"] == "sectionHeading"
        assert roles["Growth is expected to continue next year."] is None

    def test_single_title(self, analyzer, report_pdf):
        result = analyzer.analyze(report_pdf, AnalysisMode.LAYOUT)
        assert sum(1 for p in result.paragraphs if p.role == "title") == 1

    def test_headings_in_extracted_text(self, analyzer, report_pdf):
        text = extract_layout_text(analyzer.analyze(report_pdf, AnalysisMode.LAYOUT))
        assert text.startswith("<h1>Annual Report</h1>\n")
        assert "<h2>Outlook</h2>" in text

    def test_strict_ratios_disable_headings(self, report_pdf):
        analyzer = PyMuPDFLayoutAnalyzer(title_ratio=10.0, heading_ratio=10.0)
        result = analyzer.analyze(report_pdf, AnalysisMode.LAYOUT)
        assert all(p.role is None for p in result.paragraphs)


class TestLayoutTable:
    def test_cells_and_spans(self, analyzer):
        table = SimpleNamespace(
            extract=lambda: [["Region", "Value"], ["North", "10"], ["Total  sum", None]],
            header=SimpleNamespace(external=False),
        )
        builder = _ContentBuilder()
        builder.append("intro\n")

        layout_table = analyzer._layout_table(table, 3, builder)

        assert layout_table.row_count == 3
        assert layout_table.column_count == 2
        assert layout_table.page_number == 3
        assert builder.text() == "intro\nRegion Value\nNorth 10\nTotal sum"
        assert layout_table.spans[0].offset == 6
        assert table_to_html(layout_table) == (
            "<table><tr><th>Region</th><th>Value</th></tr>"
            "<tr><td>North</td><td>10</td></tr>"
            "<tr><td colSpan=2>Total sum</td></tr></table>"
        )

    def test_external_header_is_content(self, analyzer):
        table = SimpleNamespace(
            extract=lambda: [["a", "b"]],
            header=SimpleNamespace(external=True),
        )
        layout_table = analyzer._layout_table(table, 1, _ContentBuilder())
        assert {cell.kind for cell in layout_table.cells} == {"content"}
