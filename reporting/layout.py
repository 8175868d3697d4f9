"""
Layout Cursor

Tracks the current page and vertical write position while a report is laid
out. Every renderer that draws a block of known height must call
`ensure_space(height)` first, with an upper bound of the block height, and
`advance(height)` after drawing it. Drawing first and discovering overflow
afterwards would split content across the page edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .document import DrawOp, RenderedDocument
from .errors import LayoutOverflowError
from .styles import (
    MARGIN_BOTTOM,
    MARGIN_LEFT,
    MARGIN_RIGHT,
    MARGIN_TOP,
    PAGE_HEIGHT,
    PAGE_WIDTH,
)


logger = logging.getLogger(__name__)

# Float slack for heights built from mm conversions
_EPSILON = 1e-6


@dataclass(frozen=True)
class PageGeometry:
    """Page size and margins, in points."""

    width: float = PAGE_WIDTH
    height: float = PAGE_HEIGHT
    top_margin: float = MARGIN_TOP
    bottom_margin: float = MARGIN_BOTTOM
    left_margin: float = MARGIN_LEFT
    right_margin: float = MARGIN_RIGHT

    def __post_init__(self):
        if self.top_margin + self.bottom_margin >= self.height:
            raise ValueError("margins leave no usable page height")
        if self.left_margin + self.right_margin >= self.width:
            raise ValueError("margins leave no usable page width")

    @property
    def content_width(self) -> float:
        return self.width - self.left_margin - self.right_margin

    @property
    def content_bottom(self) -> float:
        """Lowest y position content may reach."""
        return self.height - self.bottom_margin

    @property
    def usable_height(self) -> float:
        return self.content_bottom - self.top_margin


class LayoutCursor:
    """
    Vertical write position on the current page of a RenderedDocument.

    Created fresh for each document and discarded once the output is
    captured.
    """

    def __init__(self, document: RenderedDocument, geometry: PageGeometry | None = None):
        self.document = document
        self.geometry = geometry or PageGeometry(width=document.width, height=document.height)
        self.page_index = document.page_count - 1
        self.y = self.geometry.top_margin
        self.page_breaks = 0

    # -------------------------------------------------------------------------
    # Geometry shortcuts
    # -------------------------------------------------------------------------

    @property
    def page_height(self) -> float:
        return self.geometry.height

    @property
    def bottom_margin(self) -> float:
        return self.geometry.bottom_margin

    @property
    def left(self) -> float:
        return self.geometry.left_margin

    @property
    def right(self) -> float:
        return self.geometry.width - self.geometry.right_margin

    @property
    def width(self) -> float:
        return self.geometry.content_width

    @property
    def at_page_top(self) -> bool:
        return self.y <= self.geometry.top_margin + _EPSILON

    # -------------------------------------------------------------------------
    # Space management
    # -------------------------------------------------------------------------

    def remaining_space(self) -> float:
        """Height left above the bottom margin on the current page."""
        return self.page_height - self.bottom_margin - self.y

    def ensure_space(self, required_height: float) -> bool:
        """
        Break to a new page if the next block would not fit.

        Args:
            required_height: Upper bound of the block about to be drawn.

        Returns:
            True if a page break occurred.
        """
        if self.remaining_space() + _EPSILON >= required_height:
            return False
        if self.at_page_top:
            # A fresh page is as good as it gets; breaking again only adds blanks
            logger.warning(
                "Block of %.1fpt is taller than the usable page height (%.1fpt)",
                required_height,
                self.geometry.usable_height,
            )
            return False
        self._break_page()
        return True

    def advance(self, height: float):
        """Move the write position down after drawing a block."""
        if height < 0:
            raise ValueError("advance height must be non-negative")
        new_y = self.y + height
        if new_y > self.geometry.content_bottom + _EPSILON:
            raise LayoutOverflowError(
                f"Advanced to y={new_y:.1f} past content bottom "
                f"{self.geometry.content_bottom:.1f} on page {self.page_index + 1}"
            )
        self.y = new_y

    def reset(self):
        """
        Start a new page explicitly (forced section start).

        An untouched current page is reused rather than left blank.
        """
        if self.document.current_page.is_blank:
            self.y = self.geometry.top_margin
            return
        self._break_page()

    def _break_page(self):
        self.document.add_page()
        self.page_index += 1
        self.page_breaks += 1
        self.y = self.geometry.top_margin

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def draw(self, op: DrawOp):
        """Record an operation on the current page."""
        self.document.draw(op)
