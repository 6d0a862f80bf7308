# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API request and response models."""

from trainingdesk.models.reports import (
    ReportExportRequest,
    ReportFilter,
    ReportPage,
    ReportRow,
    ReportType,
)

__all__ = [
    "ReportExportRequest",
    "ReportFilter",
    "ReportPage",
    "ReportRow",
    "ReportType",
]
