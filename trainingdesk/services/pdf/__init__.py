# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""PDF generation.

Declarative templates (templates) are rendered by TemplateRenderer
(renderer) through a page writer with table pagination (writer).
"""

from trainingdesk.services.pdf.renderer import TemplateRenderer, interpolate, lookup_path
from trainingdesk.services.pdf.templates import (
    DocumentTemplate,
    EffectiveStyle,
    TemplateLoader,
    merge_style,
)
from trainingdesk.services.pdf.writer import (
    ColumnLayout,
    PageWriter,
    TableState,
    TableWriter,
    layout_columns,
)

__all__ = [
    "TemplateRenderer",
    "interpolate",
    "lookup_path",
    "DocumentTemplate",
    "EffectiveStyle",
    "TemplateLoader",
    "merge_style",
    "ColumnLayout",
    "PageWriter",
    "TableState",
    "TableWriter",
    "layout_columns",
]
