# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the template renderer."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from trainingdesk.domains.reports.exceptions import TemplateNotFoundError
from trainingdesk.services.pdf.renderer import TemplateRenderer, interpolate, lookup_path
from trainingdesk.services.pdf.templates import TemplateLoader
from trainingdesk.services.pdf.writer import PageWriter


@pytest.fixture
def renderer(report_settings) -> TemplateRenderer:
    """Renderer over the bundled templates."""
    return TemplateRenderer(TemplateLoader(report_settings.templates_dir))


def dedication_context(rows: list[dict], **overrides) -> dict:
    context = {
        "center_name": "Centro Norte",
        "course_name": "Prevención de riesgos",
        "issue_date": "18/10/2026",
        "logo": None,
        "include_passwords": False,
        "show_time_spent": False,
        "rows": rows,
    }
    context.update(overrides)
    return context


def student(i: int) -> dict:
    return {
        "moodle_username": f"user{i}",
        "moodle_password": "pw",
        "employee": f"APELLIDO {i}, Nombre",
        "time_spent_label": "1h 0m",
        "completion_label": "50%",
    }


class TestInterpolate:
    """Tests for variable interpolation."""

    def test_replaces_tokens(self) -> None:
        assert interpolate("Cursos {{center_name}} ({{ issue_date }})", {
            "center_name": "Norte",
            "issue_date": "01/02/2026",
        }) == "Cursos Norte (01/02/2026)"

    def test_missing_and_none_render_empty(self) -> None:
        assert interpolate("[{{missing}}][{{empty}}]", {"empty": None}) == "[][]"

    def test_dotted_paths(self) -> None:
        assert interpolate("{{company.city}}", {"company": {"city": "Bilbao"}}) == "Bilbao"

    def test_bytes_never_printed(self) -> None:
        assert interpolate("{{logo}}", {"logo": b"\x89PNG"}) == ""

    def test_lookup_path_on_objects(self) -> None:
        obj = MagicMock()
        obj.group.name = "G1"

        assert lookup_path(obj, "group.name") == "G1"
        assert lookup_path({"a": None}, "a.b") is None
        assert lookup_path({"a": 1}, None) is None


class TestTemplateRenderer:
    """Tests for TemplateRenderer."""

    def test_renders_dedication_table(self, renderer: TemplateRenderer) -> None:
        writer = PageWriter()

        tables = renderer.render(writer, "dedication-v1", dedication_context([student(1), student(2)]))

        assert len(tables) == 1
        assert [c.title for c in tables[0].columns] == ["Usuario", "Alumno", "%"]
        assert writer.finish().startswith(b"%PDF")

    def test_password_column_follows_context_flag(self, renderer: TemplateRenderer) -> None:
        writer = PageWriter()

        tables = renderer.render(
            writer, "dedication-v1", dedication_context([student(1)], include_passwords=True)
        )

        assert [c.title for c in tables[0].columns] == ["Usuario", "Clave", "Alumno", "%"]

    def test_long_table_repeats_header_offsets(self, renderer: TemplateRenderer) -> None:
        writer = PageWriter()

        tables = renderer.render(
            writer, "dedication-v1", dedication_context([student(i) for i in range(150)])
        )

        offsets = tables[0].header_offsets
        assert len(offsets) >= 2
        assert len(set(offsets)) == 1
        assert writer.page_count == len(offsets)

    def test_image_skipped_without_data(self, renderer: TemplateRenderer) -> None:
        writer = PageWriter()

        with patch.object(PageWriter, "draw_image") as draw_image:
            renderer.render(writer, "dedication-v1", dedication_context([], logo=None))

        draw_image.assert_not_called()

    def test_image_drawn_at_right_edge(self, renderer: TemplateRenderer, png_bytes: bytes) -> None:
        writer = PageWriter()

        with patch.object(PageWriter, "draw_image", return_value=True) as draw_image:
            renderer.render(writer, "dedication-v1", dedication_context([], logo=png_bytes))

        data, x, width = draw_image.call_args.args
        assert data == png_bytes
        assert width == 120
        assert x == pytest.approx(writer.left + writer.usable_width - 120)

    def test_certification_renders_with_branding(
        self,
        renderer: TemplateRenderer,
        png_bytes: bytes,
    ) -> None:
        writer = PageWriter()
        context = {
            "rows": [student(1)],
            "issuer": "D. Ana Ruiz, administrador de Formación SL.",
            "logo": png_bytes,
            "signature": png_bytes,
            "center_name": "Centro Norte",
            "course_name": "Prevención de riesgos",
            "company_name": "Formación SL",
            "company_city": "Bilbao",
            "start_date": "02/03/2026",
            "end_date": "30/04/2026",
            "hours": 20,
            "modality": "Online",
            "issue_date": "18 de octubre de 2026",
        }

        tables = renderer.render(writer, "certification-v1", context)

        assert [c.title for c in tables[0].columns] == ["Alumno", "DNI", "%"]
        assert writer.finish().startswith(b"%PDF")

    def test_certificate_signature_stays_on_page(
        self,
        renderer: TemplateRenderer,
        png_bytes: bytes,
    ) -> None:
        """Tables ending anywhere near the footer still leave the signature whole."""
        for count in range(1, 120):
            writer = PageWriter()
            context = {
                "rows": [student(i) for i in range(count)],
                "issuer": "D. Ana Ruiz, administrador de Formación SL.",
                "logo": png_bytes,
                "signature": png_bytes,
                "center_name": "Centro Norte",
                "course_name": "Prevención de riesgos",
                "company_city": "Bilbao",
                "issue_date": "18 de octubre de 2026",
            }

            renderer.render(writer, "certification-v1", context)

            assert writer.y <= writer.height - writer.margin, count

    def test_every_template_page_is_rendered(self, tmp_path: Path) -> None:
        (tmp_path / "two.yaml").write_text(
            "pages:\n"
            "  - elements:\n      - {type: title, text: Uno}\n"
            "  - elements:\n      - {type: paragraph, text: Dos}\n"
        )
        writer = PageWriter()

        TemplateRenderer(TemplateLoader(tmp_path)).render(writer, "two", {})

        assert writer.page_count == 2

    def test_unknown_template_raises(self, renderer: TemplateRenderer) -> None:
        with pytest.raises(TemplateNotFoundError):
            renderer.render(PageWriter(), "missing-v9", {})

    def test_unknown_named_style_falls_back(self, tmp_path: Path) -> None:
        (tmp_path / "styled.yaml").write_text(
            "pages:\n  - elements:\n      - {type: title, text: Hola, style: nope}\n"
        )
        writer = PageWriter()

        TemplateRenderer(TemplateLoader(tmp_path)).render(writer, "styled", {})

        assert writer.finish().startswith(b"%PDF")
