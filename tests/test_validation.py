"""Tests for mediactl.core.validation module."""

from __future__ import annotations

from pathlib import Path

import pytest

from mediactl.core.exceptions import InvalidURLError, ValidationError
from mediactl.core.validation import (
    validate_max_files,
    validate_parent_id,
    validate_path_exists,
    validate_server_url,
    validate_workers,
)

# =============================================================================
# URL Validation Tests
# =============================================================================


class TestValidateServerUrl:
    """Tests for validate_server_url."""

    def test_valid_https_url(self):
        assert validate_server_url("https://api.example.com") == "https://api.example.com"

    def test_valid_http_url(self):
        assert validate_server_url("http://localhost:8080") == "http://localhost:8080"

    def test_strips_trailing_slash_and_whitespace(self):
        assert validate_server_url("  https://api.example.com//  ") == "https://api.example.com"

    def test_empty_url_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("   ")

    def test_bad_scheme_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("ftp://api.example.com")

    def test_missing_host_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("https://")


# =============================================================================
# Identifier & Limit Validation Tests
# =============================================================================


class TestValidateParentId:
    """Tests for validate_parent_id."""

    def test_none_and_blank(self):
        assert validate_parent_id(None) is None
        assert validate_parent_id("  ") is None

    def test_valid_ids(self):
        assert validate_parent_id("folder-1") == "folder-1"
        assert validate_parent_id(" a.b:c_d ") == "a.b:c_d"

    def test_path_separator_rejected(self):
        with pytest.raises(ValidationError):
            validate_parent_id("a/b")


class TestValidateLimits:
    """Tests for max_files and workers."""

    def test_max_files(self):
        assert validate_max_files(1) == 1
        with pytest.raises(ValidationError):
            validate_max_files(0)

    def test_workers(self):
        assert validate_workers(16) == 16
        with pytest.raises(ValidationError):
            validate_workers(0)
        with pytest.raises(ValidationError):
            validate_workers(17)


class TestValidatePathExists:
    """Tests for validate_path_exists."""

    def test_existing_file(self, temp_dir: Path):
        path = temp_dir / "a.png"
        path.write_bytes(b"x")
        assert validate_path_exists(path) == path

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            validate_path_exists(temp_dir / "missing.png")

    def test_directory_rejected(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            validate_path_exists(temp_dir)
