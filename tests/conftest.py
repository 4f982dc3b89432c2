"""
Pytest fixtures for the chunking pipeline tests.
"""

import pytest

from chunking.token_counter import get_token_counter
from layout.models import (
    BoundingRegion,
    LayoutPage,
    LayoutParagraph,
    LayoutResult,
    LayoutTable,
    Span,
    TableCell,
)


class FakeAnalyzer:
    """Layout analyzer double that returns a prepared result."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def analyze(self, data, mode, file_type="pdf"):
        self.calls.append((mode, file_type))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(scope="session")
def counter():
    """The shared cl100k_base token counter."""
    return get_token_counter()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    delays = []

    def sleep(seconds):
        delays.append(seconds)

    sleep.delays = delays
    return sleep


@pytest.fixture
def long_text():
    """About 3000 characters of plain prose."""
    sentences = [
        f"Sentence number {i} explains how documents are split into chunks for retrieval. "
        for i in range(40)
    ]
    text = "".join(sentences)
    assert len(text) >= 3000
    return text


@pytest.fixture
def report_layout():
    """
    One-page layout result: a title, a body paragraph, a section heading,
    a 3x2 table and a closing paragraph.
    """
    title = "Annual Report"
    body = "Revenue grew strongly this year across all regions."
    heading = "Results"
    table_text = "Region Value North 10 South 20"
    closing = "The table above lists the results per region."
    content = "\n".join([title, body, heading, table_text, closing]) + "\n"

    def span(text):
        return Span(offset=content.index(text), length=len(text))

    cells = [
        TableCell(row_index=0, column_index=0, kind="columnHeader", content="Region"),
        TableCell(row_index=0, column_index=1, kind="columnHeader", content="Value"),
        TableCell(row_index=1, column_index=0, content="North"),
        TableCell(row_index=1, column_index=1, content="10"),
        TableCell(row_index=2, column_index=0, content="South"),
        TableCell(row_index=2, column_index=1, content="20"),
    ]

    return LayoutResult(
        content=content,
        pages=[LayoutPage(page_number=1, spans=[Span(offset=0, length=len(content))])],
        paragraphs=[
            LayoutParagraph(role="title", spans=[span(title)]),
            LayoutParagraph(spans=[span(body)]),
            LayoutParagraph(role="sectionHeading", spans=[span(heading)]),
            LayoutParagraph(spans=[span(closing)]),
        ],
        tables=[
            LayoutTable(
                row_count=3,
                column_count=2,
                spans=[span(table_text)],
                cells=cells,
                bounding_regions=[BoundingRegion(page_number=1)],
            )
        ],
    )


@pytest.fixture
def fake_analyzer_factory():
    return FakeAnalyzer
