"""
Rendered document model.

A report is first laid out as an ordered list of pages, each an ordered
list of positioned draw operations. Nothing is written to PDF until the
layout is complete, which is what lets the assembler stamp "Page X of Y"
footers once the page count is known.

Coordinates are top-down: (0, 0) is the top-left corner of the page and
y grows towards the bottom. `text` baselines are given as y positions.
The PDF writer flips them into ReportLab's bottom-up space.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from reportlab.lib.colors import Color


ALIGNMENTS = ("left", "center", "right")


# =============================================================================
# Draw Operations
# =============================================================================


@dataclass(frozen=True)
class TextOp:
    """A single line of text. `x` is the anchor for the alignment."""

    x: float
    y: float
    text: str
    font: str
    size: float
    color: Color
    align: str = "left"


@dataclass(frozen=True)
class RectOp:
    """A filled and/or stroked rectangle; (x, y) is its top-left corner."""

    x: float
    y: float
    width: float
    height: float
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    line_width: float = 0.5


@dataclass(frozen=True)
class LineOp:
    """A straight line segment."""

    x1: float
    y1: float
    x2: float
    y2: float
    color: Color
    width: float = 0.5


@dataclass(frozen=True)
class CellOp:
    """
    A table cell: background band plus one line of already-fitted text.

    `kind` is "header", "body" or "total"; `stripe` is the alternation index
    of the row on its page (0 for header and total cells).
    """

    x: float
    y: float
    width: float
    height: float
    text: str
    font: str
    size: float
    color: Color
    align: str = "left"
    fill: Optional[Color] = None
    kind: str = "body"
    stripe: int = 0
    padding: float = 4.0


DrawOp = Union[TextOp, RectOp, LineOp, CellOp]


# =============================================================================
# Pages and Document
# =============================================================================


@dataclass
class Page:
    """One page of drawing operations."""

    number: int
    ops: list[DrawOp] = field(default_factory=list)

    @property
    def is_blank(self) -> bool:
        return not self.ops

    def texts(self) -> list[str]:
        """All visible strings on the page, in draw order."""
        return [op.text for op in self.ops if isinstance(op, (TextOp, CellOp)) and op.text]


class RenderedDocument:
    """
    Ordered pages of draw operations.

    The document starts with one empty page. Once finalized it can no longer
    be changed.
    """

    def __init__(self, width: float, height: float, title: str = ""):
        self.width = width
        self.height = height
        self.title = title
        self._pages: list[Page] = [Page(number=1)]
        self._finalized = False

    @property
    def pages(self) -> tuple[Page, ...]:
        return tuple(self._pages)

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def current_page(self) -> Page:
        return self._pages[-1]

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def _check_mutable(self):
        if self._finalized:
            raise RuntimeError("RenderedDocument is finalized and cannot be modified")

    def add_page(self) -> Page:
        """Append a new empty page and make it current."""
        self._check_mutable()
        page = Page(number=len(self._pages) + 1)
        self._pages.append(page)
        return page

    def draw(self, op: DrawOp, page: Optional[Page] = None):
        """Append an operation to the current page (or an explicit page)."""
        self._check_mutable()
        (page or self.current_page).ops.append(op)

    def finalize(self):
        """Freeze the document."""
        self._finalized = True

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def texts(self) -> list[str]:
        """All visible strings across the document, in page order."""
        return [text for page in self._pages for text in page.texts()]
