# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment reports domain.

Modules:
    keys: Row key format shared with the web client.
    selection: Pure reducer for the paginated table selection.
    grouping: Row ordering and sectioning per report type.
    repository: Enrollment row source (SQLAlchemy).
    branding: Organization logo, signature and issuer text.
    service: Export dispatcher and PDF rendering.
"""

from trainingdesk.domains.reports.exceptions import (
    InvalidRowKeyError,
    ReportServiceError,
    TemplateNotFoundError,
    UnknownReportTypeError,
)
from trainingdesk.domains.reports.keys import parse_row_key, row_key

__all__ = [
    "ReportServiceError",
    "TemplateNotFoundError",
    "UnknownReportTypeError",
    "InvalidRowKeyError",
    "row_key",
    "parse_row_key",
]
