# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Page writing primitives over a reportlab canvas.

PageWriter keeps a top-down cursor (points from the top edge of the page)
so layout code reads in document order; it converts to reportlab's
bottom-up coordinates only when drawing.

TableWriter is the pagination state machine for tabular sections:

    PAGE_OPEN --draw_header--> HEADER_DRAWN --write_row--> ROW_WRITING
    ROW_WRITING --write_row past the footer line--> new page, header
        redrawn at the same X offsets, then ROW_WRITING

Example:
    >>> writer = PageWriter(page_size="A4", margin=40)
    >>> writer.write_text("Cursos Centro Norte", font_size=14, color="#7E1515")
    >>> table = TableWriter(writer, layout_columns(columns, writer, {}))
    >>> table.draw_header()
    >>> for cells in rows:
    ...     table.write_row(cells)
    >>> pdf_bytes = writer.finish()
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Any, Mapping, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from trainingdesk.services.pdf.templates import DEFAULT_FONT, DEFAULT_FONT_SIZE, TableColumn

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}
LEADING_FACTOR = 1.2
ELLIPSIS = "..."
HEADER_GAP_LINES = 0.2


def fit_text(text: str, width: float, font: str, font_size: float) -> str:
    """Truncate text with an ellipsis so it fits in width points."""
    if stringWidth(text, font, font_size) <= width:
        return text
    ellipsis_width = stringWidth(ELLIPSIS, font, font_size)
    if ellipsis_width > width:
        return ""
    end = len(text)
    while end > 0 and stringWidth(text[:end], font, font_size) + ellipsis_width > width:
        end -= 1
    return text[:end].rstrip() + ELLIPSIS


class PageWriter:
    """Single-document writer with a top-down cursor.

    Attributes:
        width: Page width in points.
        height: Page height in points.
        margin: Margin on every side in points.
        reserved_footer: Space above the bottom margin kept free of rows.
        line_height: Default table row height.
        y: Cursor, in points from the top edge.
        page_count: Pages started so far.
    """

    def __init__(
        self,
        page_size: str = "A4",
        margin: float = 40.0,
        line_height: float = 12.0,
        reserved_footer: float = 40.0,
        title: str | None = None,
    ) -> None:
        self.width, self.height = PAGE_SIZES[page_size]
        self.margin = margin
        self.line_height = line_height
        self.reserved_footer = reserved_footer

        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=(self.width, self.height))
        self._canvas.setCreator("TrainingDesk")
        if title:
            self._canvas.setTitle(title)

        self.y = margin
        self.page_count = 1
        self._font = DEFAULT_FONT
        self._font_size = DEFAULT_FONT_SIZE
        self._finished = False

    @property
    def left(self) -> float:
        return self.margin

    @property
    def usable_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        """Cursor position past which table rows move to a new page."""
        return self.height - self.margin - self.reserved_footer

    @property
    def canvas(self) -> canvas.Canvas:
        return self._canvas

    def new_page(self) -> None:
        """Close the current page and reset the cursor to the top margin."""
        self._canvas.showPage()
        self.page_count += 1
        self.y = self.margin

    def move_down(self, lines: float = 1.0) -> None:
        """Advance the cursor by a number of lines of the current font."""
        if lines > 0:
            self.y += lines * self._font_size * LEADING_FACTOR

    def move_by(self, points: float) -> None:
        if points > 0:
            self.y += points

    def set_font(self, font: str, font_size: float) -> None:
        if font not in pdfmetrics.standardFonts and font not in pdfmetrics.getRegisteredFontNames():
            logger.warning("Unknown font %s, using %s", font, DEFAULT_FONT)
            font = DEFAULT_FONT
        self._font = font
        self._font_size = font_size
        self._canvas.setFont(font, font_size)

    def set_color(self, color: str) -> None:
        try:
            fill = colors.toColor(color)
        except ValueError:
            logger.warning("Invalid color %s, using black", color)
            fill = colors.black
        self._canvas.setFillColor(fill)

    def _baseline(self, top: float, font_size: float) -> float:
        return self.height - top - font_size

    def draw_cell(self, x: float, top: float, width: float, text: str) -> None:
        """Draw one line of text at a fixed position, truncated to width."""
        fitted = fit_text(text, width, self._font, self._font_size)
        if fitted:
            self._canvas.drawString(x, self._baseline(top, self._font_size), fitted)

    def write_text(
        self,
        text: str,
        font: str = DEFAULT_FONT,
        font_size: float = DEFAULT_FONT_SIZE,
        align: str = "left",
        color: str = "#000000",
        indent: float = 0.0,
    ) -> None:
        """Write wrapped text at the cursor, breaking pages as needed.

        Explicit newlines are kept as line breaks.
        """
        left = self.left + indent
        width = self.usable_width - indent
        self.set_font(font, font_size)
        self.set_color(color)
        leading = font_size * LEADING_FACTOR

        for paragraph in text.split("\n"):
            lines = simpleSplit(paragraph, self._font, font_size, width) or [""]
            for line in lines:
                if self.y + leading > self.height - self.margin:
                    self.new_page()
                    self.set_font(self._font, font_size)
                    self.set_color(color)
                baseline = self._baseline(self.y, font_size)
                if align == "center":
                    self._canvas.drawCentredString(left + width / 2, baseline, line)
                elif align == "right":
                    self._canvas.drawRightString(left + width, baseline, line)
                else:
                    self._canvas.drawString(left, baseline, line)
                self.y += leading

        self.set_color("#000000")

    def draw_image(self, data: bytes | None, x: float, width: float) -> bool:
        """Draw an image at the cursor and advance past it.

        Missing data is skipped. Undecodable images are logged and skipped.
        An image that would cross the bottom margin starts a new page.

        Returns:
            True if the image was drawn.
        """
        if not data:
            return False
        try:
            reader = ImageReader(BytesIO(data))
            image_width, image_height = reader.getSize()
            height = width * image_height / image_width
            if self.y + height > self.height - self.margin and self.y > self.margin:
                self.new_page()
            self._canvas.drawImage(
                reader,
                x,
                self.height - self.y - height,
                width=width,
                height=height,
                mask="auto",
            )
        except Exception as e:
            logger.warning("Unable to draw image in PDF: %s", str(e))
            return False
        self.y += height
        return True

    def finish(self) -> bytes:
        """Close the document and return the PDF bytes."""
        if not self._finished:
            self._canvas.save()
            self._finished = True
        return self._buffer.getvalue()


@dataclass(frozen=True)
class ColumnLayout:
    """A positioned table column."""

    title: str
    path: str | None
    x: float
    width: float


def layout_columns(
    columns: Sequence[TableColumn],
    writer: PageWriter,
    context: Mapping[str, Any],
) -> list[ColumnLayout]:
    """Compute column positions across the usable page width.

    Columns whose `when` flag is falsy in the context are omitted. Fixed
    columns keep their width; flexible columns share what remains, each
    at least its min_width.
    """
    visible = [c for c in columns if c.when is None or bool(context.get(c.when))]

    fixed_total = sum(c.width for c in visible if c.width is not None)
    flexible = [c for c in visible if c.width is None]
    remaining = max(0.0, writer.usable_width - fixed_total)
    share = math.floor(remaining / len(flexible)) if flexible else 0

    layout: list[ColumnLayout] = []
    x = writer.left
    for column in visible:
        if column.width is not None:
            width = column.width
        else:
            width = max(column.min_width or 0, share)
        layout.append(ColumnLayout(title=column.title, path=column.path, x=x, width=width))
        x += width
    return layout


class TableState(Enum):
    PAGE_OPEN = "page_open"
    HEADER_DRAWN = "header_drawn"
    ROW_WRITING = "row_writing"


class TableWriter:
    """Writes table rows with repeated headers across page breaks.

    Attributes:
        columns: Positioned columns.
        state: Current pagination state.
        header_offsets: X offsets of every header drawn, one tuple per draw.
    """

    def __init__(
        self,
        writer: PageWriter,
        columns: Sequence[ColumnLayout],
        header_font: str = "Helvetica-Bold",
        header_font_size: float = 9,
        cell_font: str = "Helvetica",
        cell_font_size: float = 9,
        color: str = "#000000",
    ) -> None:
        self._writer = writer
        self.columns = list(columns)
        self._header_font = header_font
        self._header_font_size = header_font_size
        self._cell_font = cell_font
        self._cell_font_size = cell_font_size
        self._color = color
        self.state = TableState.PAGE_OPEN
        self.header_offsets: list[tuple[float, ...]] = []

    def draw_header(self) -> None:
        """Draw column titles on a common baseline at the cursor."""
        writer = self._writer
        writer.set_font(self._header_font, self._header_font_size)
        writer.set_color(self._color)
        top = writer.y
        for column in self.columns:
            writer.draw_cell(column.x, top, column.width, column.title)
        self.header_offsets.append(tuple(column.x for column in self.columns))

        writer.y = top + writer.line_height
        writer.move_down(HEADER_GAP_LINES)
        writer.set_font(self._cell_font, self._cell_font_size)
        self.state = TableState.HEADER_DRAWN

    def write_row(self, cells: Sequence[str]) -> bool:
        """Write one row, breaking the page first if the cursor is past
        the footer line.

        Args:
            cells: Cell texts, one per column.

        Returns:
            True if a page break happened before the row.
        """
        if self.state is TableState.PAGE_OPEN:
            self.draw_header()

        writer = self._writer
        broke = False
        if writer.y > writer.bottom_limit:
            writer.new_page()
            self.state = TableState.PAGE_OPEN
            self.draw_header()
            broke = True

        writer.set_font(self._cell_font, self._cell_font_size)
        writer.set_color(self._color)
        top = writer.y
        for column, text in zip(self.columns, cells):
            writer.draw_cell(column.x, top, column.width, text)
        writer.y = top + writer.line_height
        self.state = TableState.ROW_WRITING
        return broke
