"""
PDF writer.

Replays a finished RenderedDocument onto a ReportLab canvas and streams the
result into a ChunkCollector. The layout engine works top-down; ReportLab's
origin is the bottom-left corner, so every y is flipped here and nowhere
else.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from reportlab.pdfgen import canvas

from .document import CellOp, DrawOp, LineOp, RectOp, RenderedDocument, TextOp
from .errors import StreamFailureError


logger = logging.getLogger(__name__)

# Vertical centring of a single text line inside a cell band
_CELL_BASELINE_FACTOR = 0.35


class ChunkCollector:
    """
    Write sink that keeps every chunk it receives.

    Args:
        max_bytes: Optional cap; exceeding it fails the write.
        on_chunk: Optional hook called before each chunk is stored.
    """

    name = "<report-buffer>"

    def __init__(
        self,
        max_bytes: Optional[int] = None,
        on_chunk: Optional[Callable[[bytes], None]] = None,
    ):
        self.max_bytes = max_bytes
        self.on_chunk = on_chunk
        self.chunks: list[bytes] = []
        self.size = 0

    def write(self, data) -> int:
        if isinstance(data, str):
            data = data.encode("latin-1")
        if self.on_chunk is not None:
            self.on_chunk(data)
        if self.max_bytes is not None and self.size + len(data) > self.max_bytes:
            raise StreamFailureError(
                f"Report output exceeded {self.max_bytes} bytes"
            )
        self.chunks.append(bytes(data))
        self.size += len(data)
        return len(data)

    def flush(self):
        pass

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)

    def discard(self):
        """Drop everything collected so far."""
        self.chunks.clear()
        self.size = 0


def write_pdf(
    document: RenderedDocument,
    sink,
    *,
    title: str = "",
    author: str = "",
    subject: str = "",
    invariant: bool = True,
    before_page: Optional[Callable[[int], None]] = None,
):
    """
    Render every page of a finalized document onto a PDF canvas.

    Args:
        document: Finalized RenderedDocument.
        sink: File-like object receiving the PDF bytes.
        title, author, subject: PDF metadata.
        invariant: Produce byte-identical output for identical input.
        before_page: Hook called with the page number before each page.

    Raises:
        StreamFailureError: If the sink fails to accept the output.
    """
    if not document.is_finalized:
        raise RuntimeError("only finalized documents can be written")

    pdf = canvas.Canvas(
        sink,
        pagesize=(document.width, document.height),
        invariant=1 if invariant else 0,
        pageCompression=1,
    )
    pdf.setTitle(title or document.title)
    pdf.setAuthor(author)
    pdf.setSubject(subject)
    pdf.setCreator(author)

    for page in document:
        if before_page is not None:
            before_page(page.number)
        for op in page.ops:
            _draw_op(pdf, op, document.height)
        pdf.showPage()

    try:
        pdf.save()
    except (OSError, MemoryError) as exc:
        logger.error("Writing report output failed: %s", exc)
        raise StreamFailureError(f"Failed to write report output: {exc}") from exc


# =============================================================================
# Operation Replay
# =============================================================================


def _draw_op(pdf: canvas.Canvas, op: DrawOp, height: float):
    if isinstance(op, CellOp):
        _draw_cell(pdf, op, height)
    elif isinstance(op, TextOp):
        _draw_text(pdf, op.x, height - op.y, op.text, op.font, op.size, op.color, op.align)
    elif isinstance(op, RectOp):
        _draw_rect(pdf, op.x, height - op.y - op.height, op.width, op.height,
                   op.fill, op.stroke, op.line_width)
    elif isinstance(op, LineOp):
        pdf.saveState()
        pdf.setStrokeColor(op.color)
        pdf.setLineWidth(op.width)
        pdf.line(op.x1, height - op.y1, op.x2, height - op.y2)
        pdf.restoreState()
    else:
        raise TypeError(f"unknown draw operation {type(op).__name__}")


def _draw_text(pdf: canvas.Canvas, x, y, text, font, size, color, align):
    pdf.saveState()
    pdf.setFont(font, size)
    pdf.setFillColor(color)
    if align == "center":
        pdf.drawCentredString(x, y, text)
    elif align == "right":
        pdf.drawRightString(x, y, text)
    else:
        pdf.drawString(x, y, text)
    pdf.restoreState()


def _draw_rect(pdf: canvas.Canvas, x, y, width, height, fill, stroke, line_width):
    if fill is None and stroke is None:
        return
    pdf.saveState()
    if fill is not None:
        pdf.setFillColor(fill)
    if stroke is not None:
        pdf.setStrokeColor(stroke)
        pdf.setLineWidth(line_width)
    pdf.rect(x, y, width, height, stroke=int(stroke is not None), fill=int(fill is not None))
    pdf.restoreState()


def _draw_cell(pdf: canvas.Canvas, op: CellOp, height: float):
    bottom = height - op.y - op.height
    _draw_rect(pdf, op.x, bottom, op.width, op.height, op.fill, None, 0)
    if not op.text:
        return
    baseline = bottom + op.height / 2 - op.size * _CELL_BASELINE_FACTOR
    if op.align == "center":
        x = op.x + op.width / 2
    elif op.align == "right":
        x = op.x + op.width - op.padding
    else:
        x = op.x + op.padding
    _draw_text(pdf, x, baseline, op.text, op.font, op.size, op.color, op.align)
