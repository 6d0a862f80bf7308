# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declarative document templates.

A template is a YAML document describing pages of elements:

    meta: {id: certification-v1, title: Certificado}
    styles:
      title: {font: Helvetica-Bold, font_size: 16, align: center}
    pages:
      - elements:
          - {type: image, var: logo, position: top-right}
          - {type: title, text: "{{course_name}}", style: title}
          - type: table
            rows_var: rows
            columns:
              - {title: Alumno, path: employee}
              - {title: DNI, path: dni, width: 90}

Elements form a closed union on `type`. Style fields set on an element
win over the fields of its named style.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from trainingdesk.core.config.yaml_loader import YAMLLoadError, find_document, load_yaml
from trainingdesk.domains.reports.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)

Align = Literal["left", "center", "right"]
ImagePosition = Literal["top-left", "top-right", "bottom-right", "center"]

DEFAULT_FONT = "Helvetica"
DEFAULT_FONT_SIZE = 10.0
DEFAULT_COLOR = "#000000"


class TemplateStyle(BaseModel):
    """Named style, referenced by elements."""

    model_config = ConfigDict(extra="forbid")

    font: str | None = None
    font_size: float | None = Field(default=None, gt=0)
    align: Align | None = None
    color: str | None = None
    margin_top: float | None = Field(default=None, ge=0)
    margin_top_lines: float | None = Field(default=None, ge=0)
    margin_bottom: float | None = Field(default=None, ge=0)
    margin_bottom_lines: float | None = Field(default=None, ge=0)


class _Element(TemplateStyle):
    style: str | None = None


class TitleElement(_Element):
    type: Literal["title"]
    text: str


class HeaderElement(_Element):
    type: Literal["header"]
    text: str


class ParagraphElement(_Element):
    type: Literal["paragraph"]
    text: str


class ImageElement(_Element):
    type: Literal["image"]
    var: str
    width: float = Field(default=120, gt=0)
    position: ImagePosition = "top-right"


class TableColumn(BaseModel):
    """Table column.

    Attributes:
        title: Header text.
        path: Dotted path into each row mapping.
        width: Fixed width in points; flexible when unset.
        min_width: Lower bound for a flexible column.
        when: Context flag that must be truthy for the column to exist.
    """

    model_config = ConfigDict(extra="forbid")

    title: str
    path: str | None = None
    width: float | None = Field(default=None, gt=0)
    min_width: float | None = Field(default=None, ge=0)
    when: str | None = None


class TableElement(_Element):
    type: Literal["table"]
    rows_var: str = "rows"
    columns: list[TableColumn] = Field(min_length=1)
    header_style: str | None = None
    cell_style: str | None = None


TemplateElement = Annotated[
    Union[TitleElement, HeaderElement, ParagraphElement, ImageElement, TableElement],
    Field(discriminator="type"),
]


class TemplatePage(BaseModel):
    elements: list[TemplateElement] = Field(default_factory=list)


class TemplateMeta(BaseModel):
    id: str | None = None
    title: str | None = None


class DocumentTemplate(BaseModel):
    """A validated document template."""

    meta: TemplateMeta = Field(default_factory=TemplateMeta)
    variables: list[str] = Field(default_factory=list)
    styles: dict[str, TemplateStyle] = Field(default_factory=dict)
    pages: list[TemplatePage] = Field(min_length=1)


@dataclass(frozen=True)
class EffectiveStyle:
    """Style fields after merging an element with its named style."""

    font: str = DEFAULT_FONT
    font_size: float = DEFAULT_FONT_SIZE
    align: Align = "left"
    color: str = DEFAULT_COLOR
    margin_top: float | None = None
    margin_top_lines: float | None = None
    margin_bottom: float | None = None
    margin_bottom_lines: float | None = None


_STYLE_FIELDS = tuple(TemplateStyle.model_fields)


def merge_style(
    element: TemplateStyle | None,
    style: TemplateStyle | None,
    base: EffectiveStyle | None = None,
) -> EffectiveStyle:
    """Resolve the effective style of an element.

    Precedence: element field, then named style field, then base.

    Args:
        element: The element (or any style-bearing model).
        style: The named style the element references, if any.
        base: Defaults for fields neither sets.

    Returns:
        The merged style.
    """
    base = base or EffectiveStyle()
    merged = {}
    for name in _STYLE_FIELDS:
        value = getattr(element, name, None) if element is not None else None
        if value is None and style is not None:
            value = getattr(style, name)
        merged[name] = value if value is not None else getattr(base, name)
    return EffectiveStyle(**merged)


class TemplateLoader:
    """Loads and caches templates from a directory.

    Attributes:
        _directory: Directory holding `<id>.yaml` (or .yml/.json) files.
        _cache: Templates already parsed, by id.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._cache: dict[str, DocumentTemplate] = {}

    def load(self, template_id: str) -> DocumentTemplate:
        """Load a template by id.

        Args:
            template_id: Template identifier, the file stem.

        Returns:
            The validated template.

        Raises:
            TemplateNotFoundError: If the file is missing, unreadable or
                does not validate.
        """
        cached = self._cache.get(template_id)
        if cached is not None:
            return cached

        path = find_document(self._directory, template_id)
        if path is None:
            logger.error("Template %s not found in %s", template_id, self._directory)
            raise TemplateNotFoundError(template_id, "file not found")

        try:
            template = DocumentTemplate.model_validate(load_yaml(path))
        except YAMLLoadError as e:
            logger.error("Template %s failed to load: %s", template_id, e.reason)
            raise TemplateNotFoundError(template_id, e.reason) from e
        except ValidationError as e:
            logger.error("Template %s is invalid: %s", template_id, e)
            raise TemplateNotFoundError(template_id, "invalid template") from e

        self._cache[template_id] = template
        return template
