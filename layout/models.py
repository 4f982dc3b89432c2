"""
Data Models for Layout Analysis Results.

A layout analysis run over a PDF (or Word/Slide file) returns one flat
``content`` string plus structural metadata that points into it by character
offset:

    LayoutResult
    ├── content        flat text buffer of the whole document
    ├── pages          one span per page (reading order)
    ├── paragraphs     spans with an optional semantic role
    └── tables         spans + a cell grid, bound to a page

Design Principles:
    - Pydantic v2 models, frozen value objects
    - Offsets are character offsets into ``content``
    - Role and cell-kind values use the layout service's vocabulary
      ("title", "sectionHeading", "columnHeader", "rowHeader", ...)

Usage:
    from layout.models import LayoutResult

    result = LayoutResult.model_validate(payload)
    for page in result.pages:
        print(page.page_number, page.offset, page.length)
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalysisMode(str, Enum):
    """
    LAYOUT: headings and tables are detected
    READ: plain reading order only
    """

    LAYOUT = "layout"
    READ = "read"


class ParagraphRole(str, Enum):
    TITLE = "title"
    SECTION_HEADING = "sectionHeading"
    PAGE_HEADER = "pageHeader"
    PAGE_FOOTER = "pageFooter"
    PAGE_NUMBER = "pageNumber"
    FOOTNOTE = "footnote"


class CellKind(str, Enum):
    CONTENT = "content"
    COLUMN_HEADER = "columnHeader"
    ROW_HEADER = "rowHeader"
    STUB_HEAD = "stubHead"
    DESCRIPTION = "description"


class Span(BaseModel):
    """A range of characters in LayoutResult.content."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(..., ge=0)
    length: int = Field(..., ge=0)

    @property
    def end(self) -> int:
        return self.offset + self.length


class BoundingRegion(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1, description="1-indexed page number")


class LayoutPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1)
    spans: list[Span] = Field(default_factory=list)

    @property
    def offset(self) -> int:
        return self.spans[0].offset if self.spans else 0

    @property
    def length(self) -> int:
        return self.spans[0].length if self.spans else 0


class LayoutParagraph(BaseModel):
    """A paragraph, optionally tagged with a structural role."""

    model_config = ConfigDict(frozen=True)

    role: Optional[str] = None
    spans: list[Span] = Field(default_factory=list)

    @property
    def start_offset(self) -> int:
        return self.spans[0].offset

    @property
    def end_offset(self) -> int:
        return self.spans[0].end


class TableCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_index: int = Field(..., ge=0)
    column_index: int = Field(..., ge=0)
    row_span: int = Field(1, ge=1)
    column_span: int = Field(1, ge=1)
    kind: str = CellKind.CONTENT.value
    content: str = ""


class LayoutTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_count: int = Field(..., ge=0)
    column_count: int = Field(0, ge=0)
    spans: list[Span] = Field(default_factory=list)
    cells: list[TableCell] = Field(default_factory=list)
    bounding_regions: list[BoundingRegion] = Field(default_factory=list)

    @property
    def page_number(self) -> Optional[int]:
        """Page the table is bound to (first bounding region)."""
        if not self.bounding_regions:
            return None
        return self.bounding_regions[0].page_number


class LayoutResult(BaseModel):
    """Complete output of one layout analysis call."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    pages: list[LayoutPage] = Field(default_factory=list)
    paragraphs: list[LayoutParagraph] = Field(default_factory=list)
    tables: list[LayoutTable] = Field(default_factory=list)

    def tables_on_page(self, page_number: int) -> list[LayoutTable]:
        """Tables bound to ``page_number`` (1-indexed), in document order."""
        return [t for t in self.tables if t.page_number == page_number]
