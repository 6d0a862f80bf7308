# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for TrainingDesk.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Date formatting for printed reports
"""

from trainingdesk.utils.datetime import (
    format_long_date,
    format_short_date,
    format_time_spent,
    to_date,
    utc_now,
)
from trainingdesk.utils.logging import bind_context, clear_context, get_logger, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "to_date",
    "format_short_date",
    "format_long_date",
    "format_time_spent",
]
