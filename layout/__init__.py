"""
Layout Module - document layout analysis results and analyzers

Quick Start:
    from layout import PyMuPDFLayoutAnalyzer, AnalysisMode

    analyzer = PyMuPDFLayoutAnalyzer()
    result = analyzer.analyze(pdf_bytes, mode=AnalysisMode.LAYOUT)
    print(len(result.pages), len(result.tables))
"""

from .analyzer import LayoutAnalyzer, PyMuPDFLayoutAnalyzer
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

__all__ = [
    "LayoutAnalyzer",
    "PyMuPDFLayoutAnalyzer",
    "AnalysisMode",
    "BoundingRegion",
    "CellKind",
    "LayoutPage",
    "LayoutParagraph",
    "LayoutResult",
    "LayoutTable",
    "ParagraphRole",
    "Span",
    "TableCell",
]
