"""
Section Renderers

Each section is a function `(ctx, cursor) -> bool` that draws one named
block of the report and returns False when it had nothing to draw. A
skipped section must not move the cursor.

Project report order:
1. Cover & summary
2. Project details
3. Timeline (only when dates are set)
4. Notes (only when notes are present)
5. Financial analysis
6. Category analysis (only when materials exist)
7. Detailed materials table (placeholder when empty)
8. Conclusions
Footers and page numbers are stamped afterwards by `stamp_page_footers`,
once the page count is known.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit

from core.models import Material, Project, normalise_category
from core.statistics import Stats
from utils.formatting import (
    MISSING,
    format_currency,
    format_date,
    format_datetime,
    format_number,
    format_percent,
    format_quantity,
    sanitize_text,
    title_case_status,
)

from .document import LineOp, RectOp, RenderedDocument, TextOp
from .layout import LayoutCursor, PageGeometry
from .styles import (
    CARD_GAP,
    CARD_HEIGHT,
    FOOTER_OFFSET,
    HEADER_HEIGHT,
    PARAGRAPH_GAP,
    ROW_HEIGHT,
    SECTION_GAP,
    Palette,
)
from .tables import ColumnSpec, TableRenderer, fit_text


# =============================================================================
# Thresholds
# =============================================================================

SUPPLIER_CONSOLIDATION_THRESHOLD = 20
NO_MATERIALS_MESSAGE = "No materials recorded for this project."

RULE_GAP = 3 * mm
LABEL_WIDTH = 45 * mm
BAR_HEIGHT = 5 * mm


# =============================================================================
# Report Context
# =============================================================================


@dataclass(frozen=True)
class ReportContext:
    """Everything a section needs; built once per document."""

    project: Project
    materials: tuple[Material, ...]
    stats: Stats
    styles: object
    generated_at: datetime
    locale: str = "fr-FR"
    currency: str = "MRU"
    company_name: str = "BuildTrack"

    def money(self, amount) -> str:
        return format_currency(amount, self.currency, self.locale)

    def number(self, value, decimals: int = 0) -> str:
        return format_number(value, decimals, self.locale)

    def percent(self, value) -> str:
        return format_percent(value, 1, self.locale)

    def date(self, value) -> str:
        return format_date(value, self.locale)

    def timestamp(self, value) -> str:
        return format_datetime(value, self.locale)

    def quantity(self, material: Material) -> str:
        return format_quantity(material.quantity, material.unit, self.locale)


Section = Callable[[ReportContext, LayoutCursor], bool]


# =============================================================================
# Drawing Helpers
# =============================================================================


def _baseline(top: float, style: ParagraphStyle) -> float:
    """Baseline for a line whose box starts at `top`."""
    return top + style.fontSize


def _text_op(x: float, top: float, text: str, style: ParagraphStyle, align: str = "left") -> TextOp:
    return TextOp(
        x=x,
        y=_baseline(top, style),
        text=text,
        font=style.fontName,
        size=style.fontSize,
        color=style.textColor,
        align=align,
    )


def _wrap(text: str, style: ParagraphStyle, width: float) -> list[str]:
    text = sanitize_text(text)
    if not text:
        return []
    return simpleSplit(text, style.fontName, style.fontSize, width)


def _section_title(ctx: ReportContext, cursor: LayoutCursor, title: str, keep_with: float = ROW_HEIGHT):
    """Draw a section heading, keeping it on the same page as what follows."""
    style = ctx.styles["SectionTitle"]
    gap = 0.0 if cursor.at_page_top else SECTION_GAP
    if cursor.ensure_space(gap + style.leading + RULE_GAP + keep_with):
        gap = 0.0
    cursor.advance(gap)
    cursor.draw(_text_op(cursor.left, cursor.y, title, style))
    cursor.advance(style.leading)
    cursor.draw(LineOp(cursor.left, cursor.y, cursor.right, cursor.y, Palette.ACCENT, width=1))
    cursor.advance(RULE_GAP)


def _subsection_title(ctx: ReportContext, cursor: LayoutCursor, title: str, keep_with: float = ROW_HEIGHT):
    style = ctx.styles["SubsectionTitle"]
    gap = 0.0 if cursor.at_page_top else PARAGRAPH_GAP
    if cursor.ensure_space(gap + style.leading + keep_with):
        gap = 0.0
    cursor.advance(gap)
    cursor.draw(_text_op(cursor.left, cursor.y, title, style))
    cursor.advance(style.leading)


def _paragraph(ctx: ReportContext, cursor: LayoutCursor, text: str, style_name: str = "BodyText",
               indent: float = 0.0, bullet: str = ""):
    """Draw wrapped text line by line; long paragraphs continue on the next page."""
    style = ctx.styles[style_name]
    lines = _wrap(text, style, cursor.width - indent)
    for i, line in enumerate(lines):
        cursor.ensure_space(style.leading)
        if bullet and i == 0:
            cursor.draw(_text_op(cursor.left + indent - 4 * mm, cursor.y, bullet, style))
        cursor.draw(_text_op(cursor.left + indent, cursor.y, line, style))
        cursor.advance(style.leading)


def _key_values(ctx: ReportContext, cursor: LayoutCursor, pairs: Sequence[tuple[str, str]]):
    """
    Two-column label/value rows.

    A row's wrapped value stays on one page when it fits on one; a value
    taller than a page flows line by line instead.
    """
    label_style = ctx.styles["Label"]
    value_style = ctx.styles["BodyText"]
    value_width = cursor.width - LABEL_WIDTH
    for label, value in pairs:
        lines = _wrap(value, value_style, value_width) or [MISSING]
        label_text = fit_text(label, LABEL_WIDTH - 2 * mm, label_style.fontName, label_style.fontSize)
        height = max(label_style.leading, value_style.leading * len(lines))

        if height <= cursor.geometry.usable_height:
            cursor.ensure_space(height)
            cursor.draw(_text_op(cursor.left, cursor.y, label_text, label_style))
            for i, line in enumerate(lines):
                cursor.draw(_text_op(cursor.left + LABEL_WIDTH, cursor.y + i * value_style.leading,
                                     line, value_style))
            cursor.advance(height)
            continue

        first_height = max(label_style.leading, value_style.leading)
        for i, line in enumerate(lines):
            line_height = first_height if i == 0 else value_style.leading
            cursor.ensure_space(line_height)
            if i == 0:
                cursor.draw(_text_op(cursor.left, cursor.y, label_text, label_style))
            cursor.draw(_text_op(cursor.left + LABEL_WIDTH, cursor.y, line, value_style))
            cursor.advance(line_height)


def _metric_cards(ctx: ReportContext, cursor: LayoutCursor, cards: Sequence[tuple[str, str]]):
    """A row of equal-width figure cards."""
    value_style = ctx.styles["MetricValue"]
    label_style = ctx.styles["MetricLabel"]
    count = len(cards)
    card_width = (cursor.width - CARD_GAP * (count - 1)) / count

    cursor.ensure_space(CARD_HEIGHT)
    for i, (label, value) in enumerate(cards):
        x = cursor.left + i * (card_width + CARD_GAP)
        center = x + card_width / 2
        cursor.draw(RectOp(x, cursor.y, card_width, CARD_HEIGHT,
                           fill=Palette.ACCENT_LIGHT, stroke=Palette.LIGHT_GRAY))
        cursor.draw(_text_op(center, cursor.y + 4 * mm,
                             fit_text(value, card_width - 4 * mm, value_style.fontName,
                                      value_style.fontSize),
                             value_style, align="center"))
        cursor.draw(_text_op(center, cursor.y + 12 * mm,
                             fit_text(label, card_width - 4 * mm, label_style.fontName,
                                      label_style.fontSize),
                             label_style, align="center"))
    cursor.advance(CARD_HEIGHT)


def _notice(ctx: ReportContext, cursor: LayoutCursor, text: str):
    """A shaded single-line notice block."""
    style = ctx.styles["BodyText"]
    height = style.leading + 4 * mm
    cursor.ensure_space(height)
    cursor.draw(RectOp(cursor.left, cursor.y, cursor.width, height, fill=Palette.PALE_GRAY))
    cursor.draw(_text_op(cursor.left + 3 * mm, cursor.y + 2 * mm, text, style))
    cursor.advance(height)


def _usage_bar(ctx: ReportContext, cursor: LayoutCursor, percentage: float):
    """Horizontal budget usage bar, capped at the full width."""
    cursor.ensure_space(BAR_HEIGHT + PARAGRAPH_GAP)
    cursor.advance(PARAGRAPH_GAP)
    ratio = max(0.0, min(percentage / 100, 1.0))
    fill = Palette.WARNING if percentage > 100 else Palette.SUCCESS
    cursor.draw(RectOp(cursor.left, cursor.y, cursor.width, BAR_HEIGHT,
                       fill=Palette.PALE_GRAY, stroke=Palette.LIGHT_GRAY))
    if ratio > 0:
        cursor.draw(RectOp(cursor.left, cursor.y, cursor.width * ratio, BAR_HEIGHT, fill=fill))
    cursor.advance(BAR_HEIGHT)


def _category_label(category: str) -> str:
    return title_case_status(category)


def _item_label(ctx: ReportContext, material: Optional[Material]) -> str:
    if material is None:
        return MISSING
    return f"{sanitize_text(material.name) or MISSING} ({ctx.money(material.cost)})"


# =============================================================================
# Section 1: Cover & Summary
# =============================================================================


def render_cover(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    """Wordmark, title block and headline figures."""
    project = ctx.project
    brand = ctx.styles["CoverBrand"]
    title = ctx.styles["CoverTitle"]
    subtitle = ctx.styles["CoverSubtitle"]

    cursor.ensure_space(brand.leading + 20 * mm + title.leading)
    cursor.draw(_text_op(cursor.left, cursor.y, ctx.company_name.upper(), brand))
    cursor.advance(brand.leading + 20 * mm)

    cursor.draw(_text_op(cursor.left, cursor.y, "Project Report", title))
    cursor.advance(title.leading)

    name_lines = _wrap(project.name, title, cursor.width)
    if len(name_lines) > 2:
        overflow = " ".join(name_lines[1:])
        name_lines = [name_lines[0], fit_text(overflow, cursor.width, title.fontName, title.fontSize)]
    for line in name_lines:
        cursor.ensure_space(title.leading)
        cursor.draw(_text_op(cursor.left, cursor.y, line, title))
        cursor.advance(title.leading)

    cursor.ensure_space(PARAGRAPH_GAP)
    cursor.advance(PARAGRAPH_GAP)
    for line in (
        f"Location: {sanitize_text(project.location) or MISSING}",
        f"Status: {title_case_status(project.status)}",
        f"Generated: {ctx.timestamp(ctx.generated_at)}",
    ):
        cursor.ensure_space(subtitle.leading)
        cursor.draw(_text_op(cursor.left, cursor.y,
                             fit_text(line, cursor.width, subtitle.fontName, subtitle.fontSize),
                             subtitle))
        cursor.advance(subtitle.leading)

    cursor.ensure_space(SECTION_GAP * 2)
    cursor.advance(SECTION_GAP * 2)

    stats = ctx.stats
    budget = ctx.money(project.budget) if project.has_budget else "Not set"
    _metric_cards(ctx, cursor, [
        ("Total Material Cost", ctx.money(stats.total)),
        ("Materials", ctx.number(stats.count)),
        ("Average Item Cost", ctx.money(stats.average)),
        ("Budget", budget),
    ])
    return True


# =============================================================================
# Section 2: Project Details
# =============================================================================


def render_project_details(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    project = ctx.project
    _section_title(ctx, cursor, "Project Details")

    pairs = [
        ("Name", sanitize_text(project.name) or MISSING),
        ("Location", sanitize_text(project.location) or MISSING),
        ("Status", title_case_status(project.status)),
    ]
    if sanitize_text(project.description):
        pairs.append(("Description", project.description))
    pairs.extend([
        ("Created", ctx.date(project.created_at)),
        ("Last Updated", ctx.date(project.updated_at)),
        ("Budget", ctx.money(project.budget) if project.has_budget else "Not set"),
        ("Recorded Total Cost", ctx.money(project.total_cost)),
    ])
    _key_values(ctx, cursor, pairs)
    return True


# =============================================================================
# Section 3: Timeline
# =============================================================================


def render_timeline(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    project = ctx.project
    if not project.has_dates:
        return False

    _section_title(ctx, cursor, "Timeline")
    pairs = [
        ("Start Date", ctx.date(project.start_date)),
        ("End Date", ctx.date(project.end_date)),
    ]
    duration = project.duration_days
    if duration is not None:
        pairs.append(("Duration", f"{ctx.number(duration)} days"))
    _key_values(ctx, cursor, pairs)
    return True


# =============================================================================
# Section 4: Notes
# =============================================================================


def render_notes(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    notes = sanitize_text(ctx.project.notes)
    if not notes:
        return False

    _section_title(ctx, cursor, "Notes", keep_with=ctx.styles["BodyText"].leading)
    _paragraph(ctx, cursor, notes)
    return True


# =============================================================================
# Section 5: Financial Analysis
# =============================================================================


def render_financial_analysis(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    project = ctx.project
    stats = ctx.stats
    _section_title(ctx, cursor, "Financial Analysis")

    _key_values(ctx, cursor, [
        ("Total Material Cost", ctx.money(stats.total)),
        ("Number of Items", ctx.number(stats.count)),
        ("Average Cost per Item", ctx.money(stats.average)),
        ("Most Expensive Item", _item_label(ctx, stats.most_expensive)),
        ("Least Expensive Item", _item_label(ctx, stats.least_expensive)),
    ])

    status = project.budget_status(stats.total)
    if status is None:
        return True

    _subsection_title(ctx, cursor, "Budget Comparison")
    pairs = [
        ("Budget", ctx.money(project.budget)),
        ("Budget Used", ctx.percent(status.percentage)),
    ]
    if status.is_over_budget:
        pairs.append(("Overage", ctx.money(status.difference)))
    else:
        pairs.append(("Remaining", ctx.money(-status.difference)))
    _key_values(ctx, cursor, pairs)
    _usage_bar(ctx, cursor, status.percentage)
    return True


# =============================================================================
# Section 6: Category Analysis
# =============================================================================


CATEGORY_COLUMNS = (
    ColumnSpec("Category", 64 * mm, "left"),
    ColumnSpec("Items", 30 * mm, "center"),
    ColumnSpec("Total", 50 * mm, "right"),
    ColumnSpec("Share", 30 * mm, "right"),
)

# A table heading must keep its header band and first row with it
TABLE_KEEP = HEADER_HEIGHT + ROW_HEIGHT


def render_category_analysis(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    stats = ctx.stats
    if stats.is_empty:
        return False

    _section_title(ctx, cursor, "Category Analysis", keep_with=TABLE_KEEP)

    # Largest spend first; sorted() keeps first-seen order on ties
    ranked = sorted(stats.categories.items(), key=lambda item: item[1].total, reverse=True)
    rows = [
        [
            _category_label(name),
            ctx.number(breakdown.count),
            ctx.money(breakdown.total),
            ctx.percent(stats.category_share(name)),
        ]
        for name, breakdown in ranked
    ]
    total_row = [
        "Total",
        ctx.number(stats.count),
        ctx.money(stats.total),
        ctx.percent(100 if stats.total > 0 else 0),
    ]
    TableRenderer(CATEGORY_COLUMNS, styles=ctx.styles).render(rows, cursor, total_row=total_row)
    return True


# =============================================================================
# Section 7: Detailed Materials Table
# =============================================================================


MATERIAL_COLUMNS = (
    ColumnSpec("Material", 50 * mm, "left"),
    ColumnSpec("Category", 24 * mm, "left"),
    ColumnSpec("Quantity", 24 * mm, "right"),
    ColumnSpec("Unit Price", 26 * mm, "right"),
    ColumnSpec("Total", 28 * mm, "right"),
    ColumnSpec("Supplier", 22 * mm, "left"),
)


def material_row(ctx: ReportContext, material: Material) -> list[str]:
    """Cell texts for one material in the detailed table."""
    return [
        sanitize_text(material.name) or MISSING,
        _category_label(material.group),
        ctx.quantity(material),
        ctx.money(material.price_per_unit),
        ctx.money(material.cost),
        sanitize_text(material.supplier) or MISSING,
    ]


def render_materials_table(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    _section_title(ctx, cursor, "Detailed Materials", keep_with=TABLE_KEEP)

    if not ctx.materials:
        _notice(ctx, cursor, NO_MATERIALS_MESSAGE)
        return True

    rows = [material_row(ctx, m) for m in ctx.materials]
    total_row = [f"Total ({ctx.number(ctx.stats.count)} items)", "", "", "",
                 ctx.money(ctx.stats.total), ""]
    TableRenderer(MATERIAL_COLUMNS, styles=ctx.styles).render(rows, cursor, total_row=total_row)
    return True


# =============================================================================
# Section 8: Conclusions
# =============================================================================


@dataclass(frozen=True)
class Conclusion:
    """One narrative statement; `amount` carries the figure it quotes, if any."""

    kind: str
    text: str
    amount: Optional[float] = None


def build_conclusions(ctx: ReportContext) -> list[Conclusion]:
    """
    Derive the narrative statements for the conclusions section.

    Rules:
    - Budget set and total <= budget: within budget, with the remaining amount
    - Budget set and total > budget: over budget, with the overage
    - More than 20 items: supplier consolidation recommendation
    - Exactly one category used: coverage completeness recommendation
    """
    project = ctx.project
    stats = ctx.stats
    conclusions: list[Conclusion] = []

    if stats.is_empty:
        conclusions.append(Conclusion(
            "no-materials",
            "No material costs have been recorded yet; figures in this report will "
            "update once materials are added.",
        ))
    else:
        conclusions.append(Conclusion(
            "summary",
            f"The project uses {ctx.number(stats.count)} materials across "
            f"{ctx.number(stats.categories_used)} "
            f"{'category' if stats.categories_used == 1 else 'categories'} "
            f"for a total of {ctx.money(stats.total)}.",
            amount=stats.total,
        ))

    status = project.budget_status(stats.total)
    if status is not None:
        if status.is_over_budget:
            conclusions.append(Conclusion(
                "over-budget",
                f"The project is over budget by {ctx.money(status.difference)} "
                f"({ctx.percent(status.percentage)} of the budget used).",
                amount=status.difference,
            ))
        else:
            remaining = -status.difference
            conclusions.append(Conclusion(
                "within-budget",
                f"The project is within budget, with {ctx.money(remaining)} remaining "
                f"({ctx.percent(status.percentage)} of the budget used).",
                amount=remaining,
            ))

    if stats.count > SUPPLIER_CONSOLIDATION_THRESHOLD:
        conclusions.append(Conclusion(
            "supplier-consolidation",
            f"With {ctx.number(stats.count)} line items, consolidating purchases with "
            "fewer suppliers could reduce costs and simplify deliveries.",
        ))

    if stats.categories_used == 1:
        only = next(iter(stats.categories))
        conclusions.append(Conclusion(
            "coverage",
            f"All materials fall under a single category ({_category_label(only)}); "
            "check that the other trades needed for the project are accounted for.",
        ))

    return conclusions


def render_conclusions(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    conclusions = build_conclusions(ctx)
    if not conclusions:
        return False

    _section_title(ctx, cursor, "Conclusions", keep_with=ctx.styles["BulletText"].leading)
    bullet_style = ctx.styles["BulletText"]
    for conclusion in conclusions:
        _paragraph(ctx, cursor, conclusion.text, "BulletText",
                   indent=bullet_style.leftIndent, bullet="•")
        cursor.ensure_space(PARAGRAPH_GAP)
        cursor.advance(PARAGRAPH_GAP)
    return True


PROJECT_REPORT_SECTIONS: tuple[Section, ...] = (
    render_cover,
    render_project_details,
    render_timeline,
    render_notes,
    render_financial_analysis,
    render_category_analysis,
    render_materials_table,
    render_conclusions,
)

# Sections that open on a fresh page
FORCED_PAGE_SECTIONS: frozenset[Section] = frozenset({render_project_details})


# =============================================================================
# Materials List (grouped by category)
# =============================================================================


GROUP_COLUMNS = (
    ColumnSpec("Material", 58 * mm, "left"),
    ColumnSpec("Quantity", 26 * mm, "right"),
    ColumnSpec("Unit Price", 28 * mm, "right"),
    ColumnSpec("Total", 30 * mm, "right"),
    ColumnSpec("Supplier", 32 * mm, "left"),
)


def group_materials(materials: Sequence[Material]) -> dict[str, list[Material]]:
    """Group materials by category bucket, in order of first appearance."""
    groups: dict[str, list[Material]] = {}
    for material in materials:
        groups.setdefault(normalise_category(material.category), []).append(material)
    return groups


def render_materials_list_header(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    title = ctx.styles["CoverTitle"]
    subtitle = ctx.styles["CoverSubtitle"]

    lines = _wrap(f"Materials List - {ctx.project.name}", title, cursor.width)[:2]
    for line in lines:
        cursor.ensure_space(title.leading)
        cursor.draw(_text_op(cursor.left, cursor.y, line, title))
        cursor.advance(title.leading)

    summary = (
        f"{ctx.number(ctx.stats.count)} items, {ctx.money(ctx.stats.total)} - "
        f"generated {ctx.timestamp(ctx.generated_at)}"
    )
    cursor.ensure_space(subtitle.leading)
    cursor.draw(_text_op(cursor.left, cursor.y, summary, subtitle))
    cursor.advance(subtitle.leading)
    return True


def render_materials_by_category(ctx: ReportContext, cursor: LayoutCursor) -> bool:
    if not ctx.materials:
        cursor.ensure_space(SECTION_GAP)
        cursor.advance(SECTION_GAP)
        _notice(ctx, cursor, NO_MATERIALS_MESSAGE)
        return True

    renderer = TableRenderer(GROUP_COLUMNS, styles=ctx.styles)
    for category, items in group_materials(ctx.materials).items():
        _section_title(ctx, cursor, f"{_category_label(category)} ({ctx.number(len(items))})",
                       keep_with=renderer.header_height + renderer.row_height)
        rows = [
            [
                sanitize_text(m.name) or MISSING,
                ctx.quantity(m),
                ctx.money(m.price_per_unit),
                ctx.money(m.cost),
                sanitize_text(m.supplier) or MISSING,
            ]
            for m in items
        ]
        subtotal = ctx.stats.categories[category].total
        renderer.render(rows, cursor, total_row=["Subtotal", "", "", ctx.money(subtotal), ""])
    return True


MATERIALS_LIST_SECTIONS: tuple[Section, ...] = (
    render_materials_list_header,
    render_materials_by_category,
)


# =============================================================================
# Page Footers (second pass)
# =============================================================================


def stamp_page_footers(ctx: ReportContext, document: RenderedDocument, geometry: PageGeometry):
    """
    Add the footer band to every page.

    Runs after all content is laid out, so "Page X of Y" is exact.
    """
    style = ctx.styles["Footer"]
    total = document.page_count
    left = geometry.left_margin
    right = geometry.width - geometry.right_margin
    rule_y = geometry.height - FOOTER_OFFSET - 4 * mm
    baseline = geometry.height - FOOTER_OFFSET
    label = fit_text(f"{ctx.company_name} - {ctx.project.name}", (right - left) / 3,
                     style.fontName, style.fontSize)
    generated = f"Generated {ctx.timestamp(ctx.generated_at)}"

    for page in document:
        document.draw(LineOp(left, rule_y, right, rule_y, Palette.LIGHT_GRAY), page=page)
        for x, text, align in (
            (left, label, "left"),
            ((left + right) / 2, generated, "center"),
            (right, f"Page {page.number} of {total}", "right"),
        ):
            document.draw(TextOp(x, baseline, text, style.fontName, style.fontSize,
                                 style.textColor, align=align), page=page)
