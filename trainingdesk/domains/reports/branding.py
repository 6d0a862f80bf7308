# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Organization branding for printed reports.

Branding is resolved once per export and shared by every section of the
document: the issuer legal text, the issuing city, the logo and signature
images, and the plugin flags that change the report layout.

Asset failures never fail an export. A missing or unreadable file is
logged and the image is left out.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Mapping

from trainingdesk.core.config.settings import ReportSettings
from trainingdesk.infrastructure.database.models import OrganizationSettings

logger = logging.getLogger(__name__)

ORGANIZATION_FILES_PREFIX = "/api/files/organization/"
TIME_SPENT_PLUGIN = "itop_training"


@dataclass(frozen=True)
class Branding:
    """Shared render context for one export.

    Attributes:
        issuer: Legal text naming the certifying party.
        company_city: City printed next to the issue date.
        logo: Logo image bytes.
        signature: Signature image bytes.
        show_time_spent: Whether dedication reports print time spent.
    """

    issuer: str | None = None
    company_city: str | None = None
    logo: bytes | None = None
    signature: bytes | None = None
    show_time_spent: bool = False


def build_issuer_text(company: Mapping[str, Any]) -> str | None:
    """Compose the issuer sentence from the organization company settings.

    Only the parts present are included, e.g. "D. Ana Ruiz, administrador
    de Formación SL, con CIF B123 y domicilio en Calle Mayor 1."

    Returns:
        The sentence, or None when no part is configured.
    """
    responsible = company.get("responsable_nombre")
    legal_name = company.get("razon_social")
    cif = company.get("cif")
    address = company.get("direccion")

    if not (responsible or legal_name or cif or address):
        return None

    parts = [
        f"D. {responsible}, " if responsible else "",
        f"administrador de {legal_name}" if legal_name else "",
        f", con CIF {cif}" if cif else "",
        f" y domicilio en {address}" if address else "",
    ]
    return "".join(parts) + "."


def plugin_enabled(settings: Mapping[str, Any] | None, plugin: str) -> bool:
    plugins = (settings or {}).get("plugins")
    return isinstance(plugins, Mapping) and plugins.get(plugin) is True


def resolve_asset_path(stored_path: str, uploads_dir: Path, public_dir: Path) -> Path:
    """Map a stored logo/signature path to a file on disk.

    "/api/files/organization/<file>" lives under uploads/organization;
    any other path is taken relative to the public directory. Only the
    file name of an organization path is kept, so it cannot escape its
    directory.
    """
    if stored_path.startswith(ORGANIZATION_FILES_PREFIX):
        filename = PurePosixPath(stored_path).name
        return uploads_dir / "organization" / filename
    return public_dir / stored_path.lstrip("/")


async def read_asset(path: Path, label: str) -> bytes | None:
    """Read an image file, returning None on failure."""
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        logger.warning("Could not read %s file for reports: %s (%s)", label, path, e)
        return None


async def load_branding(
    organization: OrganizationSettings | None,
    settings: ReportSettings,
) -> Branding:
    """Build the branding context from the organization settings row.

    Args:
        organization: Organization settings, or None if not configured.
        settings: Report settings with the asset directories.

    Returns:
        Branding with whatever could be resolved.
    """
    if organization is None:
        return Branding()

    org_settings = organization.settings if isinstance(organization.settings, Mapping) else {}
    company = org_settings.get("company")
    company = company if isinstance(company, Mapping) else {}

    logo = None
    if organization.logo_path:
        logo = await read_asset(
            resolve_asset_path(organization.logo_path, settings.uploads_dir, settings.public_dir),
            "logo",
        )

    signature = None
    if organization.signature_path:
        signature = await read_asset(
            resolve_asset_path(organization.signature_path, settings.uploads_dir, settings.public_dir),
            "signature",
        )

    return Branding(
        issuer=build_issuer_text(company),
        company_city=company.get("ciudad") or None,
        logo=logo,
        signature=signature,
        show_time_spent=plugin_enabled(org_settings, TIME_SPENT_PLUGIN),
    )
