# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Template renderer.

Interprets a DocumentTemplate against a context mapping, writing into a
PageWriter. The caller owns the writer: several template instances (one
per report group) are rendered into the same document.

Context values:
    - scalars are interpolated into text with {{name}} tokens
    - image elements read raw bytes from the variable they name
    - table elements read a list of row mappings from rows_var
    - table columns with `when: flag` require a truthy context flag
"""

import logging
import re
from typing import Any, Mapping

from trainingdesk.services.pdf.templates import (
    DocumentTemplate,
    EffectiveStyle,
    ImageElement,
    TableElement,
    TemplateLoader,
    TemplateStyle,
    merge_style,
)
from trainingdesk.services.pdf.writer import PageWriter, TableWriter, layout_columns

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"{{\s*([^}]+?)\s*}}")

_HEADER_BASE = EffectiveStyle(font="Helvetica-Bold", font_size=9)
_CELL_BASE = EffectiveStyle(font="Helvetica", font_size=9)
_TEXT_GAP_LINES = 0.4


def lookup_path(source: Any, path: str | None) -> Any:
    """Resolve a dotted path against nested mappings or objects.

    Returns None when any segment is missing.
    """
    if not path:
        return None
    value = source
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def to_text(value: Any) -> str:
    if value is None or isinstance(value, (bytes, bytearray)):
        return ""
    return str(value)


def interpolate(text: str, context: Mapping[str, Any]) -> str:
    """Replace {{name}} tokens with context values.

    Unknown or empty variables render as an empty string.
    """
    return _TOKEN.sub(lambda match: to_text(lookup_path(context, match.group(1))), text)


class TemplateRenderer:
    """Renders templates by id into a page writer.

    Attributes:
        _loader: Template source.
    """

    def __init__(self, loader: TemplateLoader) -> None:
        self._loader = loader

    def render(
        self,
        writer: PageWriter,
        template_id: str,
        context: Mapping[str, Any],
    ) -> list[TableWriter]:
        """Render every page of a template at the writer's cursor.

        Pages after the first start a new PDF page.

        Args:
            writer: Target document.
            template_id: Template to load.
            context: Variables for interpolation, images and tables.

        Returns:
            The tables written, in order.

        Raises:
            TemplateNotFoundError: If the template cannot be loaded.
        """
        template = self._loader.load(template_id)
        return self.render_template(writer, template, context)

    def render_template(
        self,
        writer: PageWriter,
        template: DocumentTemplate,
        context: Mapping[str, Any],
    ) -> list[TableWriter]:
        tables: list[TableWriter] = []
        for index, page in enumerate(template.pages):
            if index > 0:
                writer.new_page()
            for element in page.elements:
                style = merge_style(element, self._named(template, element.style))
                if isinstance(element, ImageElement):
                    self._render_image(writer, element, style, context)
                elif isinstance(element, TableElement):
                    tables.append(self._render_table(writer, template, element, style, context))
                else:
                    self._apply_top_margin(writer, style)
                    writer.write_text(
                        interpolate(element.text, context),
                        font=style.font,
                        font_size=style.font_size,
                        align=style.align,
                        color=style.color,
                    )
                    writer.move_down(_TEXT_GAP_LINES)
                    self._apply_bottom_margin(writer, style)
        return tables

    @staticmethod
    def _named(template: DocumentTemplate, name: str | None) -> TemplateStyle | None:
        if name is None:
            return None
        style = template.styles.get(name)
        if style is None:
            logger.warning("Template %s references unknown style %s", template.meta.id, name)
        return style

    @staticmethod
    def _apply_top_margin(writer: PageWriter, style: EffectiveStyle) -> None:
        if style.margin_top_lines:
            writer.move_down(style.margin_top_lines)
        elif style.margin_top:
            writer.move_by(style.margin_top)

    @staticmethod
    def _apply_bottom_margin(writer: PageWriter, style: EffectiveStyle) -> None:
        if style.margin_bottom_lines:
            writer.move_down(style.margin_bottom_lines)
        elif style.margin_bottom:
            writer.move_by(style.margin_bottom)

    def _render_image(
        self,
        writer: PageWriter,
        element: ImageElement,
        style: EffectiveStyle,
        context: Mapping[str, Any],
    ) -> None:
        data = context.get(element.var)
        if not isinstance(data, (bytes, bytearray)) or not data:
            return

        if element.position in ("top-right", "bottom-right"):
            x = writer.left + writer.usable_width - element.width
        elif element.position == "center":
            x = max(writer.left, (writer.width - element.width) / 2)
        else:
            x = writer.left

        self._apply_top_margin(writer, style)
        writer.draw_image(bytes(data), x, element.width)
        self._apply_bottom_margin(writer, style)

    def _render_table(
        self,
        writer: PageWriter,
        template: DocumentTemplate,
        element: TableElement,
        style: EffectiveStyle,
        context: Mapping[str, Any],
    ) -> TableWriter:
        rows = context.get(element.rows_var) or []
        header = merge_style(None, self._named(template, element.header_style), _HEADER_BASE)
        cell = merge_style(None, self._named(template, element.cell_style), _CELL_BASE)

        self._apply_top_margin(writer, style)
        table = TableWriter(
            writer,
            layout_columns(element.columns, writer, context),
            header_font=header.font,
            header_font_size=header.font_size,
            cell_font=cell.font,
            cell_font_size=cell.font_size,
            color=cell.color,
        )
        table.draw_header()
        for row in rows:
            table.write_row([to_text(lookup_path(row, column.path)) for column in table.columns])
        self._apply_bottom_margin(writer, style)
        return table
