"""
Palette, typography and page geometry for the project report.

Layout measurements here drive pagination, so changing a height or margin
changes where tables break. Visual-diff baselines must be regenerated
after any change.
"""

from __future__ import annotations

from typing import Final

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, StyleSheet1
from reportlab.lib.units import mm


# =============================================================================
# Color Palette - Clean, print-friendly
# =============================================================================


class Palette:
    """
    Professional color palette optimised for print.
    White background with charcoal text for readability.
    """

    # Primary text colors
    BLACK = colors.Color(0.1, 0.1, 0.1)
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    SLATE = colors.Color(0.35, 0.38, 0.42)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    PALE_GRAY = colors.Color(0.95, 0.95, 0.95)
    WHITE = colors.white

    # Accent - site-safety orange on charcoal
    ACCENT = colors.Color(0.85, 0.45, 0.1)
    ACCENT_LIGHT = colors.Color(0.99, 0.94, 0.88)

    # Status indicators (muted for print)
    SUCCESS = colors.Color(0.15, 0.4, 0.25)
    SUCCESS_LIGHT = colors.Color(0.9, 0.95, 0.9)
    WARNING = colors.Color(0.6, 0.2, 0.15)
    WARNING_LIGHT = colors.Color(0.98, 0.92, 0.9)

    # Table bands
    HEADER_BAND = CHARCOAL
    ROW_BANDS = (WHITE, PALE_GRAY)
    TOTAL_BAND = ACCENT_LIGHT


# =============================================================================
# Page Geometry
# =============================================================================

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_LEFT: Final[float] = 18 * mm
MARGIN_RIGHT: Final[float] = 18 * mm
MARGIN_TOP: Final[float] = 18 * mm
MARGIN_BOTTOM: Final[float] = 22 * mm
CONTENT_WIDTH: Final[float] = PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT

# Footer baseline sits inside the bottom margin
FOOTER_OFFSET: Final[float] = 10 * mm

# Table bands
HEADER_HEIGHT: Final[float] = 8 * mm
ROW_HEIGHT: Final[float] = 7 * mm
TOTAL_ROW_HEIGHT: Final[float] = 8 * mm
CELL_PADDING: Final[float] = 2 * mm

# Vertical rhythm
SECTION_GAP: Final[float] = 8 * mm
PARAGRAPH_GAP: Final[float] = 3 * mm
CARD_HEIGHT: Final[float] = 20 * mm
CARD_GAP: Final[float] = 4 * mm


# =============================================================================
# Style Configuration
# =============================================================================


def get_report_styles() -> StyleSheet1:
    """
    Create text styles for the project report.

    Only font, size, leading, colour and alignment are used: text is drawn
    line by line on the canvas, not flowed by Platypus.
    """
    styles = StyleSheet1()

    styles.add(ParagraphStyle(
        name="CoverBrand",
        fontName="Helvetica",
        fontSize=10,
        leading=13,
        textColor=Palette.SLATE,
        alignment=TA_LEFT,
    ))

    styles.add(ParagraphStyle(
        name="CoverTitle",
        fontName="Helvetica-Bold",
        fontSize=22,
        leading=28,
        textColor=Palette.CHARCOAL,
        alignment=TA_LEFT,
    ))

    styles.add(ParagraphStyle(
        name="CoverSubtitle",
        fontName="Helvetica",
        fontSize=11,
        leading=15,
        textColor=Palette.SLATE,
        alignment=TA_LEFT,
    ))

    # Section headers
    styles.add(ParagraphStyle(
        name="SectionTitle",
        fontName="Helvetica-Bold",
        fontSize=14,
        leading=18,
        textColor=Palette.CHARCOAL,
    ))

    styles.add(ParagraphStyle(
        name="SubsectionTitle",
        fontName="Helvetica-Bold",
        fontSize=11,
        leading=14,
        textColor=Palette.SLATE,
    ))

    # Body text
    styles.add(ParagraphStyle(
        name="BodyText",
        fontName="Helvetica",
        fontSize=9.5,
        leading=14.25,  # 9.5 * 1.5
        textColor=Palette.CHARCOAL,
    ))

    styles.add(ParagraphStyle(
        name="Label",
        fontName="Helvetica-Bold",
        fontSize=9,
        leading=13,
        textColor=Palette.SLATE,
    ))

    styles.add(ParagraphStyle(
        name="BulletText",
        fontName="Helvetica",
        fontSize=9,
        leading=13,
        textColor=Palette.CHARCOAL,
        leftIndent=6 * mm,
    ))

    # Table styles
    styles.add(ParagraphStyle(
        name="TableHeader",
        fontName="Helvetica-Bold",
        fontSize=8,
        leading=10,
        textColor=Palette.WHITE,
    ))

    styles.add(ParagraphStyle(
        name="TableCell",
        fontName="Helvetica",
        fontSize=8.5,
        leading=11,
        textColor=Palette.CHARCOAL,
    ))

    styles.add(ParagraphStyle(
        name="TableTotal",
        fontName="Helvetica-Bold",
        fontSize=8.5,
        leading=11,
        textColor=Palette.CHARCOAL,
    ))

    # Metric cards
    styles.add(ParagraphStyle(
        name="MetricValue",
        fontName="Helvetica-Bold",
        fontSize=13,
        leading=16,
        textColor=Palette.ACCENT,
        alignment=TA_CENTER,
    ))

    styles.add(ParagraphStyle(
        name="MetricLabel",
        fontName="Helvetica",
        fontSize=8,
        leading=10,
        textColor=Palette.SLATE,
        alignment=TA_CENTER,
    ))

    styles.add(ParagraphStyle(
        name="Footer",
        fontName="Helvetica",
        fontSize=7,
        leading=9,
        textColor=Palette.GRAY,
        alignment=TA_RIGHT,
    ))

    return styles
