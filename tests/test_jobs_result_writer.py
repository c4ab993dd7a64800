"""Regression tests for storing job results on the local file system."""

from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO
import zipfile

import pytest

from pipeline_admin.jobs import job_write_results_directory, job_write_results_zip


class _ArchiveService:
    def __init__(self, archive: bytes):
        self._archive = archive

    def adapter_fetch_results(self, job_id: str, destination: BinaryIO) -> None:
        _ = job_id
        destination.write(self._archive)


def _archive(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def test_jobs_result_writer_zip_to_new_file_creates_parents(tmp_path: Path) -> None:
    archive = _archive({"a.txt": b"a"})
    destination = tmp_path / "nested" / "results.zip"

    written_path = job_write_results_zip(_ArchiveService(archive), "job-1", destination)

    assert written_path == destination
    assert destination.read_bytes() == archive


def test_jobs_result_writer_directory_extracts_tree(tmp_path: Path) -> None:
    """Unpack every archive entry below the destination directory.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate extracted files.

    Raises:
        AssertionError: Raised when extraction is incorrect.
    """

    service = _ArchiveService(_archive({"html/index.html": b"<html/>", "log.txt": b"ok"}))

    written_path = job_write_results_directory(service, "job-1", tmp_path / "out")

    assert written_path == tmp_path / "out"
    assert (tmp_path / "out" / "html" / "index.html").read_bytes() == b"<html/>"
    assert (tmp_path / "out" / "log.txt").read_bytes() == b"ok"


def test_jobs_result_writer_directory_rejects_existing_file(tmp_path: Path) -> None:
    existing_file = tmp_path / "out"
    existing_file.write_text("taken", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        job_write_results_directory(_ArchiveService(_archive({})), "job-1", existing_file)


def test_jobs_result_writer_directory_rejects_malformed_archive(tmp_path: Path) -> None:
    with pytest.raises(zipfile.BadZipFile):
        job_write_results_directory(_ArchiveService(b"not a zip"), "job-1", tmp_path / "out")
