# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Technical services for TrainingDesk.

Services:
    pdf: Template-driven PDF document generation.
"""
