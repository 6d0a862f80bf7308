# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for YAML loader utilities."""

from pathlib import Path

import pytest

from trainingdesk.core.config.yaml_loader import YAMLLoadError, find_document, load_yaml


class TestLoadYaml:
    """Tests for load_yaml function."""

    def test_load_valid_yaml_file(self, tmp_path: Path) -> None:
        """Test loading a valid YAML file."""
        yaml_file = tmp_path / "template.yaml"
        yaml_file.write_text("meta:\n  id: demo\npages: []\n")

        assert load_yaml(yaml_file) == {"meta": {"id": "demo"}, "pages": []}

    def test_load_json_document(self, tmp_path: Path) -> None:
        """Test that JSON documents parse through the YAML loader."""
        json_file = tmp_path / "template.json"
        json_file.write_text('{"meta": {"id": "demo"}, "pages": [{"elements": []}]}')

        assert load_yaml(json_file)["pages"] == [{"elements": []}]

    def test_load_empty_yaml_file_returns_empty_dict(self, tmp_path: Path) -> None:
        """Test that empty YAML files return empty dict."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert load_yaml(yaml_file) == {}

    def test_load_yaml_with_list_root_raises_error(self, tmp_path: Path) -> None:
        """Test that YAML files with list root raise error."""
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- item1\n- item2\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "YAML root must be a mapping" in str(exc_info.value)

    def test_load_invalid_syntax_raises_error(self, tmp_path: Path) -> None:
        """Test that malformed YAML raises error."""
        yaml_file = tmp_path / "broken.yaml"
        yaml_file.write_text("key: [unclosed\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "Invalid YAML syntax" in exc_info.value.reason

    def test_load_nonexistent_file_raises_error(self, tmp_path: Path) -> None:
        """Test that loading non-existent file raises error."""
        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(tmp_path / "missing.yaml")

        assert exc_info.value.reason == "File does not exist"


class TestFindDocument:
    """Tests for find_document function."""

    def test_finds_yaml_before_json(self, tmp_path: Path) -> None:
        """Test suffix priority."""
        (tmp_path / "report.json").write_text("{}")
        (tmp_path / "report.yaml").write_text("{}")

        assert find_document(tmp_path, "report") == tmp_path / "report.yaml"

    def test_missing_document_returns_none(self, tmp_path: Path) -> None:
        """Test lookup of an unknown stem."""
        assert find_document(tmp_path, "nothing") is None

    @pytest.mark.parametrize("stem", ["", "../secrets", "sub/report", ".hidden"])
    def test_rejects_stems_leaving_directory(self, tmp_path: Path, stem: str) -> None:
        """Test that path-like stems are refused."""
        assert find_document(tmp_path, stem) is None
