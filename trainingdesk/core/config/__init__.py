# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for TrainingDesk.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables
- YAML loader: Utilities for loading declarative YAML documents

Example:
    >>> from trainingdesk.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from trainingdesk.core.config.settings import (
    APISettings,
    CORSSettings,
    DatabaseSettings,
    JWTSettings,
    ReportSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from trainingdesk.core.config.yaml_loader import (
    YAMLLoadError,
    find_document,
    load_yaml,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "JWTSettings",
    "CORSSettings",
    "APISettings",
    "ReportSettings",
    # YAML utilities
    "load_yaml",
    "find_document",
    "YAMLLoadError",
]
