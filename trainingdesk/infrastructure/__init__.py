# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for TrainingDesk.

This package provides technical infrastructure components:
- database: PostgreSQL connection management and ORM models
"""
