# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for TrainingDesk.

This package contains domain services that encapsulate business logic.

Domains:
    auth: Access token validation for the admin API.
    reports: Enrollment report listing, selection and PDF export.
"""
