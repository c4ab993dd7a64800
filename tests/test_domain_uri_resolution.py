"""Regression tests for local and remote path to URI resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from pipeline_admin.domain import (
    UriNotFoundError,
    UriResolutionError,
    UriResolutionMode,
    domain_build_base_uri,
    domain_resolution_mode_for,
    domain_resolve_uri,
)


def test_domain_uri_relative_path_resolves_against_base_directory(tmp_path: Path) -> None:
    """Resolve `./` relative paths under the base directory.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate resolved URI text.

    Raises:
        AssertionError: Raised when resolution is incorrect.
    """

    (tmp_path / "tmp").mkdir()
    (tmp_path / "tmp" / "file").write_text("content", encoding="utf-8")

    resolved_uri = domain_resolve_uri("./tmp/file", UriResolutionMode.LOCAL, base_directory=tmp_path)

    assert resolved_uri == (tmp_path / "tmp" / "file").as_uri()
    assert resolved_uri.startswith("file:///")


def test_domain_uri_absolute_path_ignores_base_directory(tmp_path: Path) -> None:
    target_path = tmp_path / "book.xml"
    target_path.write_text("<book/>", encoding="utf-8")

    resolved_uri = domain_resolve_uri(str(target_path), UriResolutionMode.LOCAL, base_directory=Path("/"))

    assert resolved_uri == target_path.as_uri()


def test_domain_uri_defaults_to_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Use the current working directory when no base directory is given.

    Args:
        tmp_path: Pytest temporary directory fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate default base directory.

    Raises:
        AssertionError: Raised when the working directory is not used.
    """

    (tmp_path / "input.xml").write_text("<x/>", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert domain_resolve_uri("input.xml", UriResolutionMode.LOCAL) == (tmp_path / "input.xml").as_uri()


def test_domain_uri_percent_encodes_special_characters(tmp_path: Path) -> None:
    (tmp_path / "my book #1.xml").write_text("<book/>", encoding="utf-8")

    resolved_uri = domain_resolve_uri("my book #1.xml", UriResolutionMode.LOCAL, base_directory=tmp_path)

    assert resolved_uri.endswith("/my%20book%20%231.xml")


def test_domain_uri_missing_local_path_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(UriNotFoundError) as raised:
        domain_resolve_uri("missing/file.xml", UriResolutionMode.LOCAL, base_directory=tmp_path)

    assert raised.value.path == "missing/file.xml"


def test_domain_uri_non_file_scheme_is_rejected(tmp_path: Path) -> None:
    """Reject paths that resolve to another URI scheme.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate scheme enforcement.

    Raises:
        AssertionError: Raised when a foreign scheme is accepted.
    """

    with pytest.raises(UriResolutionError) as raised:
        domain_resolve_uri("http://example.org/book.xml", UriResolutionMode.LOCAL, base_directory=tmp_path)

    assert not isinstance(raised.value, UriNotFoundError)


def test_domain_uri_empty_local_path_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(UriResolutionError, match="empty path"):
        domain_resolve_uri("", UriResolutionMode.LOCAL, base_directory=tmp_path)


def test_domain_uri_remote_mode_returns_path_without_file_system_access() -> None:
    assert domain_resolve_uri("content/does-not-exist.xml", UriResolutionMode.REMOTE) == "content/does-not-exist.xml"


def test_domain_uri_base_uri_has_trailing_slash() -> None:
    assert domain_build_base_uri(Path("/data/books")) == "file:/data/books/"
    assert domain_build_base_uri(Path("/")) == "file:/"


def test_domain_uri_mode_follows_local_flag() -> None:
    assert domain_resolution_mode_for(True) is UriResolutionMode.LOCAL
    assert domain_resolution_mode_for(False) is UriResolutionMode.REMOTE


def test_domain_uri_expected_kind_is_checked_only_when_requested(tmp_path: Path) -> None:
    (tmp_path / "book.xml").write_text("<book/>", encoding="utf-8")
    (tmp_path / "images").mkdir()

    assert domain_resolve_uri("images", UriResolutionMode.LOCAL, base_directory=tmp_path) == (tmp_path / "images").as_uri()
    with pytest.raises(UriResolutionError, match="is not a directory") as raised:
        domain_resolve_uri("book.xml", UriResolutionMode.LOCAL, base_directory=tmp_path, expect_directory=True)
    with pytest.raises(UriResolutionError, match="is not a file"):
        domain_resolve_uri("images", UriResolutionMode.LOCAL, base_directory=tmp_path, expect_directory=False)

    assert not isinstance(raised.value, UriNotFoundError)
