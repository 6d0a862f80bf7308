# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for report branding resolution."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from trainingdesk.domains.reports.branding import (
    Branding,
    build_issuer_text,
    load_branding,
    plugin_enabled,
    read_asset,
    resolve_asset_path,
)


def make_organization(**overrides) -> MagicMock:
    """Create a mock organization settings row."""
    organization = MagicMock()
    organization.settings = {
        "company": {
            "responsable_nombre": "Ana Ruiz",
            "razon_social": "Formación SL",
            "cif": "B12345678",
            "direccion": "Calle Mayor 1",
            "ciudad": "Bilbao",
        },
        "plugins": {"itop_training": True},
    }
    organization.logo_path = None
    organization.signature_path = None
    for key, value in overrides.items():
        setattr(organization, key, value)
    return organization


class TestBuildIssuerText:
    """Tests for build_issuer_text."""

    def test_full_sentence(self) -> None:
        text = build_issuer_text({
            "responsable_nombre": "Ana Ruiz",
            "razon_social": "Formación SL",
            "cif": "B12345678",
            "direccion": "Calle Mayor 1",
        })

        assert text == (
            "D. Ana Ruiz, administrador de Formación SL, con CIF B12345678 "
            "y domicilio en Calle Mayor 1."
        )

    def test_only_present_parts(self) -> None:
        assert build_issuer_text({"razon_social": "Formación SL"}) == "administrador de Formación SL."

    def test_nothing_configured(self) -> None:
        assert build_issuer_text({}) is None
        assert build_issuer_text({"cif": ""}) is None


class TestAssetPaths:
    """Tests for logo and signature path mapping."""

    def test_organization_files_live_under_uploads(self, tmp_path: Path) -> None:
        path = resolve_asset_path(
            "/api/files/organization/logo.png", tmp_path / "uploads", tmp_path / "public"
        )

        assert path == tmp_path / "uploads" / "organization" / "logo.png"

    def test_organization_files_cannot_escape(self, tmp_path: Path) -> None:
        path = resolve_asset_path(
            "/api/files/organization/../../etc/passwd", tmp_path / "uploads", tmp_path / "public"
        )

        assert path == tmp_path / "uploads" / "organization" / "passwd"

    def test_other_paths_live_under_public(self, tmp_path: Path) -> None:
        path = resolve_asset_path("/img/firma.png", tmp_path / "uploads", tmp_path / "public")

        assert path == tmp_path / "public" / "img" / "firma.png"

    @pytest.mark.asyncio
    async def test_read_asset_missing_file_returns_none(self, tmp_path: Path) -> None:
        assert await read_asset(tmp_path / "missing.png", "logo") is None


class TestPluginEnabled:
    """Tests for plugin_enabled."""

    def test_flags(self) -> None:
        assert plugin_enabled({"plugins": {"itop_training": True}}, "itop_training")
        assert not plugin_enabled({"plugins": {"itop_training": "yes"}}, "itop_training")
        assert not plugin_enabled({"plugins": []}, "itop_training")
        assert not plugin_enabled(None, "itop_training")


class TestLoadBranding:
    """Tests for load_branding."""

    @pytest.mark.asyncio
    async def test_no_organization(self, report_settings) -> None:
        assert await load_branding(None, report_settings) == Branding()

    @pytest.mark.asyncio
    async def test_reads_logo_and_signature(self, report_settings, png_bytes: bytes) -> None:
        organization_dir = report_settings.uploads_dir / "organization"
        organization_dir.mkdir(parents=True)
        (organization_dir / "logo.png").write_bytes(png_bytes)
        signature = report_settings.public_dir / "firma.png"
        signature.parent.mkdir(parents=True)
        signature.write_bytes(b"signature")

        branding = await load_branding(
            make_organization(
                logo_path="/api/files/organization/logo.png",
                signature_path="/firma.png",
            ),
            report_settings,
        )

        assert branding.logo == png_bytes
        assert branding.signature == b"signature"
        assert branding.company_city == "Bilbao"
        assert branding.show_time_spent is True
        assert branding.issuer.startswith("D. Ana Ruiz")

    @pytest.mark.asyncio
    async def test_missing_asset_is_left_out(self, report_settings) -> None:
        branding = await load_branding(
            make_organization(logo_path="/api/files/organization/gone.png"),
            report_settings,
        )

        assert branding.logo is None
        assert branding.issuer is not None

    @pytest.mark.asyncio
    async def test_malformed_settings(self, report_settings) -> None:
        branding = await load_branding(make_organization(settings=None), report_settings)

        assert branding.issuer is None
        assert branding.company_city is None
        assert branding.show_time_spent is False
