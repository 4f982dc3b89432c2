"""
Content Cleaner - whitespace normalization and title extraction

Design:
- cleanup_content() is shared by every format and is idempotent
- Title extraction differs per document kind (text vs. HTML); the format
  table in chunking.formats picks the right extractor
- HTML is parsed with BeautifulSoup; the fallback title is cut to
  TITLE_MAX_TOKENS tokens with the shared TokenCounter

Usage:
    from chunking.cleaner import cleanup_content, extract_html_title

    text = cleanup_content(raw)
    title = extract_html_title(html, fallback="page.html")
"""

import re
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

from .token_counter import TokenCounter, get_token_counter

TITLE_PROPERTY = "title: "
TITLE_MAX_TOKENS = 128

_HORIZONTAL_WS_RUN = re.compile(r"[^\S\n]{2,}")
_HYPHEN_RUN = re.compile(r"-{2,}")
_BLANK_LINE = re.compile(r"^[^\S\n]+$", re.MULTILINE)
_NEWLINE_RUN = re.compile(r"\n{2,}")

_INVISIBLE_TAGS = ["script", "style", "noscript", "template", "head"]


def cleanup_content(content: str) -> str:
    """
    Normalize whitespace in extracted text.

    Whitespace runs are collapsed before blank lines are removed, so that a
    line holding only spaces first becomes a truly empty line.
    """
    output = _HORIZONTAL_WS_RUN.sub(" ", content)
    output = _HYPHEN_RUN.sub("--", output)
    output = _BLANK_LINE.sub("", output)
    output = _NEWLINE_RUN.sub("\n", output)
    return output.strip()


def _first_line_with_property(content: str, prop: str = TITLE_PROPERTY) -> Optional[str]:
    for line in content.splitlines():
        if line.startswith(prop):
            return line[len(prop):].strip()
    return None


def _first_alphanumeric_line(content: str) -> Optional[str]:
    for line in content.splitlines():
        if any(c.isalnum() for c in line):
            return line.strip()
    return None


def extract_text_title(content: str, fallback: str = "") -> str:
    """
    Guess the title of a plain-text document.

    Prefers an explicit ``title: `` line, then the first line with any
    letter or digit, then ``fallback``.
    """
    title = _first_line_with_property(content)
    if title is None:
        title = _first_alphanumeric_line(content)
    return title if title is not None else fallback


def _first_text_node(soup: BeautifulSoup) -> str:
    for node in soup.find_all(string=True):
        if isinstance(node, PreformattedString):
            continue
        text = node.strip()
        if text:
            return text
    return ""


def extract_html_title(
    html: str,
    fallback: str = "",
    token_counter: Optional[TokenCounter] = None,
) -> str:
    """
    Extract a title from an HTML document.

    Order: <title>, first <h1>, first <h2>, then the first non-empty text
    node truncated to TITLE_MAX_TOKENS tokens, then ``fallback``.
    """
    soup = BeautifulSoup(html, "html.parser")

    for tag_name in ("title", "h1", "h2"):
        element = soup.find(tag_name)
        if element is not None:
            return element.get_text()

    counter = token_counter or get_token_counter()
    title = counter.truncate(_first_text_node(soup), TITLE_MAX_TOKENS)
    return title or fallback


def extract_html_body(html: str) -> str:
    """
    Return the visible text of an HTML document's body, one block per line.

    Script, style and head content is dropped. Falls back to the whole
    document when there is no <body> element.
    """
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(_INVISIBLE_TAGS):
        element.extract()
    root = soup.body or soup
    return root.get_text(separator="\n")
