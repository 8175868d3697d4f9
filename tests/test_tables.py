"""
Tests for the Table Renderer

Tests covering:
1. Page breaks fall after floor(remaining / row height) rows
2. The header is redrawn first on every continuation page
3. Row striping restarts at 0 on each page
4. The total row is subject to the same space check
5. Cell text is cut with an ellipsis to fit its column
"""

import pytest
from reportlab.pdfbase.pdfmetrics import stringWidth

from reporting.document import CellOp, RenderedDocument
from reporting.layout import LayoutCursor, PageGeometry
from reporting.styles import Palette
from reporting.tables import ColumnSpec, TableRenderer, column_offsets, fit_text, render_table


HEADER = 20.0
ROW = 10.0
TOTAL = 15.0

COLUMNS = [
    ColumnSpec("Name", 100),
    ColumnSpec("Qty", 50, "right"),
    ColumnSpec("Total", 60, "right"),
]


@pytest.fixture
def cursor():
    # 200pt usable height
    geometry = PageGeometry(width=300, height=300, top_margin=50, bottom_margin=50,
                            left_margin=20, right_margin=20)
    return LayoutCursor(RenderedDocument(300, 300), geometry)


@pytest.fixture
def renderer():
    return TableRenderer(COLUMNS, header_height=HEADER, row_height=ROW, total_height=TOTAL)


def rows(n):
    return [[f"Item {i}", str(i), f"{i * 10}"] for i in range(n)]


def cells(page, kind=None):
    return [op for op in page.ops
            if isinstance(op, CellOp) and (kind is None or op.kind == kind)]


def body_rows(page):
    """Body cells of the first column, one per drawn row."""
    return [op for op in cells(page, "body") if op.x == 20]


class TestPagination:
    """Rows flow onto new pages with a repeated header."""

    def test_fits_on_one_page(self, cursor, renderer):
        result = renderer.render(rows(5), cursor)
        assert cursor.document.page_count == 1
        assert result.rows_drawn == 5
        assert result.page_breaks == 0
        assert result.header_draws == 1

    def test_break_after_floor_of_remaining_over_row_height(self, cursor, renderer):
        # After the header: 200 - 20 = 180pt -> 18 rows per page
        remaining = cursor.remaining_space() - HEADER
        per_page = int(remaining // ROW)
        assert per_page == 18

        renderer.render(rows(40), cursor)
        pages = cursor.document.pages
        assert [len(body_rows(p)) for p in pages] == [18, 18, 4]

    def test_partial_page_start(self, cursor, renderer):
        cursor.advance(105)
        # 95pt left: header + 7 rows (20 + 70 = 90)
        renderer.render(rows(10), cursor)
        pages = cursor.document.pages
        assert len(body_rows(pages[0])) == 7
        assert len(body_rows(pages[1])) == 3

    def test_header_is_first_on_continuation_pages(self, cursor, renderer):
        result = renderer.render(rows(40), cursor)
        assert result.header_draws == 3
        for page in cursor.document.pages[1:]:
            first = page.ops[0]
            assert isinstance(first, CellOp)
            assert first.kind == "header"
            assert first.text == "Name"
            assert first.y == 50

    def test_header_not_orphaned(self, cursor, renderer):
        # Room for the header but not the first row
        cursor.advance(175)
        renderer.render(rows(3), cursor)
        pages = cursor.document.pages
        assert pages[0].is_blank
        assert len(cells(pages[1], "header")) == len(COLUMNS)

    def test_row_length_must_match_columns(self, cursor, renderer):
        with pytest.raises(ValueError):
            renderer.render([["only one cell"]], cursor)


class TestStriping:
    """Alternating row backgrounds restart on every page."""

    def test_stripe_resets_after_page_break(self, cursor, renderer):
        renderer.render(rows(40), cursor)
        for page in cursor.document.pages:
            stripes = [op.stripe for op in body_rows(page)]
            assert stripes == list(range(len(stripes)))

    def test_fill_alternates(self, cursor, renderer):
        renderer.render(rows(4), cursor)
        fills = [op.fill for op in body_rows(cursor.document.pages[0])]
        assert all(fill is Palette.ROW_BANDS[i % 2] for i, fill in enumerate(fills))
        assert len(fills) == 4


class TestTotalRow:
    """The total row follows the last data row."""

    def test_total_row_drawn_after_rows(self, cursor, renderer):
        renderer.render(rows(3), cursor, total_row=["Total", "3", "30"])
        page = cursor.document.pages[0]
        totals = cells(page, "total")
        assert [op.text for op in totals] == ["Total", "3", "30"]
        assert totals[0].y == 50 + HEADER + 3 * ROW

    def test_total_row_breaks_with_header(self, cursor, renderer):
        # Header + 18 rows fill the page exactly; the total needs a new page
        renderer.render(rows(18), cursor, total_row=["Total", "", ""])
        pages = cursor.document.pages
        assert len(pages) == 2
        assert cells(pages[1])[0].kind == "header"
        assert [op.text for op in cells(pages[1], "total")][0] == "Total"

    def test_empty_table_with_total(self, cursor, renderer):
        result = renderer.render([], cursor, total_row=["Total", "0", "0"])
        assert result.rows_drawn == 0
        assert len(cells(cursor.document.pages[0], "total")) == 3


class TestCellText:
    """Truncation and geometry helpers."""

    def test_fit_text_leaves_short_text(self):
        assert fit_text("Sand", 100, "Helvetica", 9) == "Sand"

    def test_fit_text_truncates_with_ellipsis(self):
        text = "Reinforcement steel bars 12mm grade B500B"
        fitted = fit_text(text, 60, "Helvetica", 9)
        assert fitted.endswith("…")
        assert stringWidth(fitted, "Helvetica", 9) <= 60
        assert text.startswith(fitted[:-1])

    def test_fit_text_too_narrow(self):
        assert fit_text("anything", 1, "Helvetica", 9) == ""

    def test_long_cell_is_truncated_in_table(self, cursor, renderer):
        renderer.render([["A very long material name that cannot fit", "1", "10"]], cursor)
        first = body_rows(cursor.document.pages[0])[0]
        assert first.text.endswith("…")

    def test_column_offsets(self):
        assert column_offsets(COLUMNS, 20) == [20, 120, 170]

    def test_column_spec_validation(self):
        with pytest.raises(ValueError):
            ColumnSpec("Bad", 0)
        with pytest.raises(ValueError):
            ColumnSpec("Bad", 10, "justify")

    def test_render_table_wrapper(self, cursor):
        result = render_table(COLUMNS, rows(2), cursor, header_height=HEADER, row_height=ROW)
        assert result.rows_drawn == 2
