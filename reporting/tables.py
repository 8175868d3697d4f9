"""
Table Renderer

Draws a header band followed by row bands, continuing across page breaks:

1. The header is drawn at the cursor (never orphaned: it needs room for at
   least one row beneath it).
2. Before each row the cursor is asked for room; on a page break the header
   is redrawn at the top of the new page before the row.
3. Row backgrounds alternate by a running index that restarts at 0 every
   time the header is drawn, so striping restarts on each page.
4. An optional total row follows the last data row under the same rule.

Cell text wider than its column is cut with an ellipsis using real font
metrics.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import accumulate
from typing import Optional, Sequence

from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase.pdfmetrics import stringWidth

from utils.formatting import ELLIPSIS, sanitize_text

from .document import ALIGNMENTS, CellOp, LineOp
from .layout import LayoutCursor
from .styles import (
    CELL_PADDING,
    HEADER_HEIGHT,
    ROW_HEIGHT,
    TOTAL_ROW_HEIGHT,
    Palette,
    get_report_styles,
)


Row = Sequence[str]


@dataclass(frozen=True)
class ColumnSpec:
    """One table column: header label, width in points and text alignment."""

    label: str
    width: float
    align: str = "left"

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError(f"column {self.label!r} must have a positive width")
        if self.align not in ALIGNMENTS:
            raise ValueError(f"column {self.label!r} has invalid alignment {self.align!r}")


@dataclass(frozen=True)
class TableResult:
    """What a render pass produced."""

    rows_drawn: int
    page_breaks: int
    header_draws: int


def column_offsets(columns: Sequence[ColumnSpec], origin: float = 0.0) -> list[float]:
    """Left x of each column, prefix-summed from the table origin."""
    return list(accumulate((c.width for c in columns[:-1]), initial=origin))


def fit_text(text, width: float, font: str, size: float) -> str:
    """Cut text to fit within `width` points, ending with an ellipsis."""
    text = sanitize_text(text)
    if width <= 0:
        return ""
    if stringWidth(text, font, size) <= width:
        return text
    ellipsis_width = stringWidth(ELLIPSIS, font, size)
    if ellipsis_width > width:
        return ""

    # Binary search on the longest prefix that fits with the ellipsis
    low, high = 0, len(text)
    while low < high:
        mid = (low + high + 1) // 2
        if stringWidth(text[:mid], font, size) + ellipsis_width <= width:
            low = mid
        else:
            high = mid - 1
    return text[:low].rstrip() + ELLIPSIS


class TableRenderer:
    """
    Renders one table onto a LayoutCursor.

    Usage:
        renderer = TableRenderer(columns)
        result = renderer.render(rows, cursor, total_row=["Total", "", "1 200"])
    """

    def __init__(
        self,
        columns: Sequence[ColumnSpec],
        header_height: float = HEADER_HEIGHT,
        row_height: float = ROW_HEIGHT,
        total_height: float = TOTAL_ROW_HEIGHT,
        origin: Optional[float] = None,
        styles=None,
    ):
        if not columns:
            raise ValueError("a table needs at least one column")
        self.columns = list(columns)
        self.header_height = header_height
        self.row_height = row_height
        self.total_height = total_height
        self.origin = origin
        styles = styles or get_report_styles()
        self.header_style: ParagraphStyle = styles["TableHeader"]
        self.cell_style: ParagraphStyle = styles["TableCell"]
        self.total_style: ParagraphStyle = styles["TableTotal"]

    @property
    def width(self) -> float:
        return sum(c.width for c in self.columns)

    def render(
        self,
        rows: Sequence[Row],
        cursor: LayoutCursor,
        total_row: Optional[Row] = None,
    ) -> TableResult:
        """
        Draw the table at the cursor, breaking pages as needed.

        Args:
            rows: Cell texts per row, one entry per column.
            cursor: Shared layout cursor.
            total_row: Optional summary row drawn after the last data row.

        Returns:
            TableResult with counts for rows, breaks and header draws.
        """
        for row in rows:
            self._check_row(row)
        if total_row is not None:
            self._check_row(total_row)

        origin = cursor.left if self.origin is None else self.origin
        offsets = column_offsets(self.columns, origin)
        breaks_before = cursor.page_breaks

        if rows:
            first_block = self.row_height
        elif total_row is not None:
            first_block = self.total_height
        else:
            first_block = 0.0
        cursor.ensure_space(self.header_height + first_block)
        self._draw_header(cursor, offsets)
        header_draws = 1

        stripe = 0
        for row in rows:
            if cursor.ensure_space(self.row_height):
                self._draw_header(cursor, offsets)
                header_draws += 1
                stripe = 0
            self._draw_row(cursor, offsets, row, stripe)
            stripe += 1

        if total_row is not None:
            if cursor.ensure_space(self.total_height):
                self._draw_header(cursor, offsets)
                header_draws += 1
            self._draw_total(cursor, offsets, total_row)

        return TableResult(
            rows_drawn=len(rows),
            page_breaks=cursor.page_breaks - breaks_before,
            header_draws=header_draws,
        )

    # -------------------------------------------------------------------------
    # Bands
    # -------------------------------------------------------------------------

    def _check_row(self, row: Row):
        if len(row) != len(self.columns):
            raise ValueError(
                f"row has {len(row)} cells but the table has {len(self.columns)} columns"
            )

    def _draw_header(self, cursor: LayoutCursor, offsets: list[float]):
        for column, x in zip(self.columns, offsets):
            cursor.draw(self._cell(
                x, cursor.y, column, column.label, self.header_height,
                self.header_style, Palette.HEADER_BAND, kind="header", stripe=0,
            ))
        cursor.advance(self.header_height)

    def _draw_row(self, cursor: LayoutCursor, offsets: list[float], row: Row, stripe: int):
        fill = Palette.ROW_BANDS[stripe % len(Palette.ROW_BANDS)]
        for column, x, text in zip(self.columns, offsets, row):
            cursor.draw(self._cell(
                x, cursor.y, column, text, self.row_height,
                self.cell_style, fill, kind="body", stripe=stripe,
            ))
        bottom = cursor.y + self.row_height
        cursor.draw(LineOp(offsets[0], bottom, offsets[0] + self.width, bottom, Palette.LIGHT_GRAY))
        cursor.advance(self.row_height)

    def _draw_total(self, cursor: LayoutCursor, offsets: list[float], row: Row):
        top = cursor.y
        cursor.draw(LineOp(offsets[0], top, offsets[0] + self.width, top, Palette.CHARCOAL, width=0.8))
        for column, x, text in zip(self.columns, offsets, row):
            cursor.draw(self._cell(
                x, cursor.y, column, text, self.total_height,
                self.total_style, Palette.TOTAL_BAND, kind="total", stripe=0,
            ))
        cursor.advance(self.total_height)

    def _cell(
        self,
        x: float,
        y: float,
        column: ColumnSpec,
        text,
        height: float,
        style: ParagraphStyle,
        fill,
        kind: str,
        stripe: int,
    ) -> CellOp:
        inner = column.width - 2 * CELL_PADDING
        return CellOp(
            x=x,
            y=y,
            width=column.width,
            height=height,
            text=fit_text(text, inner, style.fontName, style.fontSize),
            font=style.fontName,
            size=style.fontSize,
            color=style.textColor,
            align=column.align,
            fill=fill,
            kind=kind,
            stripe=stripe,
            padding=CELL_PADDING,
        )


def render_table(
    columns: Sequence[ColumnSpec],
    rows: Sequence[Row],
    cursor: LayoutCursor,
    *,
    total_row: Optional[Row] = None,
    **options,
) -> TableResult:
    """Convenience wrapper: build a TableRenderer and render once."""
    return TableRenderer(columns, **options).render(rows, cursor, total_row=total_row)
