"""
Tests for the archive builder — zip round trip, cleanup, path safety.
"""

from __future__ import annotations

import threading
import zipfile
from pathlib import Path

import pytest

from projectgen.core import packager
from projectgen.core.errors import BuildError, ProjectNotFound
from projectgen.core.models import GeneratedFile
from projectgen.core.packager import archive_path, build_archive, collapse_duplicates


class TestBuildArchive:
    def test_round_trip(self, output_root: Path):
        zip_path = build_archive("job-1", [GeneratedFile("a/b.txt", "hello")], output_root)
        assert zip_path == output_root / "job-1.zip"
        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["a/b.txt"]
            assert zf.read("a/b.txt").decode("utf-8") == "hello"

    def test_uses_deflate(self, output_root: Path):
        zip_path = build_archive("job-2", [GeneratedFile("big.txt", "x" * 10_000)], output_root)
        with zipfile.ZipFile(zip_path) as zf:
            info = zf.getinfo("big.txt")
            assert info.compress_type == zipfile.ZIP_DEFLATED
            assert info.compress_size < info.file_size

    def test_temporary_directory_removed(self, output_root: Path):
        build_archive("job-3", [GeneratedFile("README.md", "# hi\n")], output_root)
        assert not (output_root / "job-3").exists()

    def test_output_root_created(self, tmp_path: Path):
        root = tmp_path / "nested" / "root"
        build_archive("job-4", [GeneratedFile("a.txt", "a")], root)
        assert (root / "job-4.zip").is_file()

    def test_path_escaping_job_dir_rejected(self, output_root: Path):
        with pytest.raises(BuildError):
            build_archive("job-5", [GeneratedFile("../evil.txt", "x")], output_root)
        assert not (output_root / "evil.txt").exists()

    def test_invalid_job_id_rejected(self, output_root: Path):
        with pytest.raises(BuildError):
            build_archive("../job", [GeneratedFile("a.txt", "a")], output_root)

    def test_compression_failure_keeps_directory(self, output_root: Path, monkeypatch):
        def _boom(source_dir, zip_path):
            raise OSError("disk full")

        monkeypatch.setattr(packager, "_zip_directory", _boom)
        with pytest.raises(BuildError):
            build_archive("job-6", [GeneratedFile("a/b.txt", "hello")], output_root)
        assert (output_root / "job-6" / "a" / "b.txt").read_text(encoding="utf-8") == "hello"

    def test_compression_failure_removes_partial_zip(self, output_root: Path, monkeypatch):
        def _half_written(source_dir, zip_path):
            zip_path.write_bytes(b"PK\x03\x04truncated")
            raise OSError("disk full")

        monkeypatch.setattr(packager, "_zip_directory", _half_written)
        with pytest.raises(BuildError):
            build_archive("job-7", [GeneratedFile("a.txt", "hello")], output_root)
        assert not (output_root / "job-7.zip").exists()
        assert (output_root / "job-7" / "a.txt").is_file()
        with pytest.raises(ProjectNotFound):
            archive_path("job-7", output_root)

    def test_concurrent_jobs_do_not_interfere(self, output_root: Path):
        results: dict[str, Path] = {}

        def _run(job_id: str):
            files = [GeneratedFile("shared/name.txt", job_id)] + [
                GeneratedFile(f"f{i}.txt", job_id * 50) for i in range(20)
            ]
            results[job_id] = build_archive(job_id, files, output_root)

        threads = [threading.Thread(target=_run, args=(job_id,)) for job_id in ("alpha", "beta")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for job_id in ("alpha", "beta"):
            with zipfile.ZipFile(results[job_id]) as zf:
                assert zf.read("shared/name.txt").decode("utf-8") == job_id
                assert len(zf.namelist()) == 21


class TestCollapseDuplicates:
    def test_last_write_wins_at_first_position(self):
        files = [
            GeneratedFile("a.txt", "first"),
            GeneratedFile("b.txt", "b"),
            GeneratedFile("a.txt", "second"),
        ]
        out = collapse_duplicates(files)
        assert [(f.path, f.content) for f in out] == [("a.txt", "second"), ("b.txt", "b")]

    def test_unique_paths_untouched(self):
        files = [GeneratedFile("a.txt", "a"), GeneratedFile("b.txt", "b")]
        assert collapse_duplicates(files) == files


class TestArchivePath:
    def test_existing_archive(self, output_root: Path):
        build_archive("job-7", [GeneratedFile("a.txt", "a")], output_root)
        assert archive_path("job-7", output_root) == output_root / "job-7.zip"

    def test_missing_archive(self, output_root: Path):
        with pytest.raises(ProjectNotFound):
            archive_path("does-not-exist", output_root)

    def test_traversal_is_not_found(self, output_root: Path):
        with pytest.raises(ProjectNotFound):
            archive_path("../secrets", output_root)
