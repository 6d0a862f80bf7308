# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""YAML document loader utilities.

Report templates are stored as YAML mappings on disk. JSON templates load
through the same path since JSON is a subset of YAML.

Example:
    >>> from pathlib import Path
    >>> from trainingdesk.core.config.yaml_loader import load_yaml, find_document
    >>> raw = load_yaml(Path("trainingdesk/templates/certification-v1.yaml"))
    >>> path = find_document(Path("trainingdesk/templates"), "dedication-v1")
"""

from pathlib import Path
from typing import Any

import yaml

DOCUMENT_SUFFIXES = (".yaml", ".yml", ".json")


class YAMLLoadError(Exception):
    """Raised when YAML file cannot be loaded or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize YAMLLoadError.

        Args:
            path: Path to the YAML file that failed to load.
            reason: Description of why the file failed to load.
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load YAML file '{path}': {reason}")


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a single YAML file and return its contents as a dictionary.

    Args:
        path: Path to the YAML file to load.

    Returns:
        Dictionary containing the parsed YAML contents.
        Empty dict if file is empty.

    Raises:
        YAMLLoadError: If the file doesn't exist, cannot be read,
            or contains invalid YAML.
    """
    if not path.exists():
        raise YAMLLoadError(path, "File does not exist")

    if not path.is_file():
        raise YAMLLoadError(path, "Path is not a file")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise YAMLLoadError(path, f"Cannot read file: {e}") from e

    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise YAMLLoadError(path, f"Invalid YAML syntax: {e}") from e

    # Handle empty files
    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise YAMLLoadError(
            path, f"YAML root must be a mapping, got {type(parsed).__name__}"
        )

    return parsed


def find_document(directory: Path, stem: str) -> Path | None:
    """Locate a document by stem inside a directory.

    Suffixes are tried in DOCUMENT_SUFFIXES order. Stems containing path
    separators are rejected so lookups cannot leave the directory.

    Args:
        directory: Directory to search.
        stem: File name without extension.

    Returns:
        Path of the first matching file, or None.
    """
    if not stem or "/" in stem or "\\" in stem or stem.startswith("."):
        return None

    for suffix in DOCUMENT_SUFFIXES:
        candidate = directory / f"{stem}{suffix}"
        if candidate.is_file():
            return candidate
    return None

