# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Any, Callable

import pytest
from PIL import Image

from trainingdesk.core.config import ReportSettings
from trainingdesk.models.reports import ReportRow

PACKAGE_TEMPLATES = Path(__file__).resolve().parent.parent / "trainingdesk" / "templates"


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Report Fixtures
# =============================================================================


@pytest.fixture
def report_settings(tmp_path: Path) -> ReportSettings:
    """Report settings using the bundled templates and temp asset dirs."""
    return ReportSettings(
        templates_dir=PACKAGE_TEMPLATES,
        uploads_dir=tmp_path / "uploads",
        public_dir=tmp_path / "public",
    )


@pytest.fixture
def make_row() -> Callable[..., ReportRow]:
    """Factory for report rows with sensible defaults."""

    def _make(**overrides: Any) -> ReportRow:
        data: dict[str, Any] = {
            "id_user": 1,
            "id_group": 10,
            "id_course": 100,
            "id_center": 5,
            "id_company": 2,
            "name": "Ana",
            "first_surname": "García",
            "second_surname": "López",
            "dni": "12345678Z",
            "email": "ana@example.com",
            "center_name": "Centro Norte",
            "company_name": "Formación SL",
            "group_name": "G-2026-01",
            "group_start_date": date(2026, 3, 2),
            "group_end_date": date(2026, 4, 30),
            "course_name": "Prevención de riesgos",
            "hours": 20,
            "modality": "Online",
            "completion_percentage": 75.0,
            "time_spent": 5400,
            "moodle_username": "agarcia",
            "moodle_password": "secret",
        }
        data.update(overrides)
        return ReportRow(**data)

    return _make


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG image, twice as wide as it is tall."""
    buffer = BytesIO()
    Image.new("RGB", (40, 20), (126, 21, 21)).save(buffer, format="PNG")
    return buffer.getvalue()

