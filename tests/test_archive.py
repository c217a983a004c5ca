"""Tests for session archives."""

import os
import zipfile

import pytest

from webpress.core.archive import build_archive, list_session_files
from webpress.exceptions import ArchiveError, NoFilesAvailableError


@pytest.fixture
def session_dir(tmp_path):
    directory = tmp_path / "public" / "s1"
    directory.mkdir(parents=True)
    return directory


def test_empty_session_has_no_files(session_dir, tmp_path):
    with pytest.raises(NoFilesAvailableError):
        build_archive(session_dir, tmp_path / "archives", "s1")


def test_absent_session_has_no_files(tmp_path):
    with pytest.raises(NoFilesAvailableError):
        build_archive(tmp_path / "nowhere", tmp_path / "archives", "nowhere")


def test_lists_only_regular_files(session_dir):
    (session_dir / "b.webp").write_bytes(b"b")
    (session_dir / "a.webp").write_bytes(b"a")
    (session_dir / "nested").mkdir()

    assert [p.name for p in list_session_files(session_dir)] == ["a.webp", "b.webp"]


def test_skips_conversions_in_progress(session_dir):
    (session_dir / "a.webp").write_bytes(b"a")
    (session_dir / "1700000000000_abcd1234.part").write_bytes(b"partial")

    assert [p.name for p in list_session_files(session_dir)] == ["a.webp"]


def test_archive_contains_session_files(session_dir, tmp_path):
    (session_dir / "a.webp").write_bytes(b"A" * 2000)
    (session_dir / "b.webp").write_bytes(b"B" * 3000)
    archive_dir = tmp_path / "archives"

    job = build_archive(session_dir, archive_dir, "s1")

    assert job.entries == ["a.webp", "b.webp"]
    assert os.path.dirname(job.path) == str(archive_dir)
    assert os.path.basename(job.path).startswith("s1_")
    with zipfile.ZipFile(job.path) as zf:
        assert zf.namelist() == ["a.webp", "b.webp"]
        assert zf.read("b.webp") == b"B" * 3000
    job.cleanup()
    assert not os.path.exists(job.path)


def test_archive_names_are_unique(session_dir, tmp_path):
    (session_dir / "a.webp").write_bytes(b"A" * 100)

    first = build_archive(session_dir, tmp_path / "archives", "s1")
    second = build_archive(session_dir, tmp_path / "archives", "s1")

    assert first.path != second.path
    first.cleanup()
    second.cleanup()


def test_streaming_deletes_archive(session_dir, tmp_path):
    (session_dir / "a.webp").write_bytes(os.urandom(200_000))
    job = build_archive(session_dir, tmp_path / "archives", "s1")

    data = b"".join(job.iter_bytes(chunk_size=4096))

    assert len(data) == job.size
    assert not os.path.exists(job.path)
    job.cleanup()


def test_abandoned_stream_deletes_archive(session_dir, tmp_path):
    (session_dir / "a.webp").write_bytes(os.urandom(200_000))
    job = build_archive(session_dir, tmp_path / "archives", "s1")

    stream = job.iter_bytes(chunk_size=4096)
    next(stream)
    stream.close()

    assert not os.path.exists(job.path)


def test_compression_failure_cleans_up(session_dir, tmp_path, monkeypatch):
    (session_dir / "a.webp").write_bytes(b"A" * 100)
    archive_dir = tmp_path / "archives"

    def failing_write(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(zipfile.ZipFile, "write", failing_write)

    with pytest.raises(ArchiveError) as excinfo:
        build_archive(session_dir, archive_dir, "s1")

    assert excinfo.value.message == "Failed to create ZIP"
    assert os.listdir(archive_dir) == []
