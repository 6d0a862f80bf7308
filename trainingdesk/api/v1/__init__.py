# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    reports: Enrollment report listing and PDF export endpoints.
"""

from fastapi import APIRouter

from trainingdesk.api.v1 import reports

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(reports.router, prefix="/reports", tags=["Reports"])

__all__ = ["router"]
