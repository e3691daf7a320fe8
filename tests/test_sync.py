"""Tests for folder_hasher.sync module."""

from unittest.mock import patch

import pytest

from folder_hasher.commands import compare_folders
from folder_hasher.models import HashAlgorithm
from folder_hasher.scanner import scan_folder
from folder_hasher.sync import (
    CopyError,
    SyncResult,
    copy_file,
    execute_sync,
    is_inside,
    safe_copy_file,
)


class TestCopyFile:
    """Tests for copy_file function."""

    def test_copy_file_basic(self, temp_dir):
        src = temp_dir / "source.txt"
        dst = temp_dir / "dest.txt"
        src.write_text("content")

        copy_file(src, dst)

        assert dst.read_text() == "content"

    def test_copy_file_creates_parent_dirs(self, temp_dir):
        src = temp_dir / "source.txt"
        dst = temp_dir / "subdir" / "nested" / "dest.txt"
        src.write_text("content")

        copy_file(src, dst)

        assert dst.read_text() == "content"

    def test_copy_file_existing_parent_dir(self, temp_dir):
        src = temp_dir / "source.txt"
        (temp_dir / "subdir").mkdir()
        dst = temp_dir / "subdir" / "dest.txt"
        src.write_text("content")

        copy_file(src, dst)
        copy_file(src, dst)

        assert dst.read_text() == "content"

    def test_copy_file_overwrites(self, temp_dir):
        src = temp_dir / "source.txt"
        dst = temp_dir / "dest.txt"
        src.write_text("new content")
        dst.write_text("old content")

        copy_file(src, dst)

        assert dst.read_text() == "new content"

    def test_copy_file_preserves_mtime(self, temp_dir):
        src = temp_dir / "source.txt"
        dst = temp_dir / "dest.txt"
        src.write_text("content")

        copy_file(src, dst)

        assert dst.stat().st_mtime == src.stat().st_mtime


class TestSafeCopyFile:
    """Tests for CopyError and safe_copy_file."""

    def test_copy_error_attributes(self):
        error = CopyError("rel/path.txt", "/src/path.txt", "/dst/path.txt", "File not found")
        assert error.relative_path == "rel/path.txt"
        assert error.src_path == "/src/path.txt"
        assert error.dst_path == "/dst/path.txt"
        assert error.error == "File not found"

    def test_safe_copy_file_success(self, temp_dir):
        src = temp_dir / "source.txt"
        dst = temp_dir / "dest.txt"
        src.write_text("content")

        assert safe_copy_file(src, dst, "source.txt") is None
        assert dst.read_text() == "content"

    def test_safe_copy_file_nonexistent_source(self, temp_dir):
        error = safe_copy_file(temp_dir / "nonexistent.txt", temp_dir / "dest.txt", "nonexistent.txt")

        assert isinstance(error, CopyError)
        assert error.relative_path == "nonexistent.txt"
        assert not (temp_dir / "dest.txt").exists()

    def test_safe_copy_file_returns_copy_error_on_failure(self, temp_dir):
        src = temp_dir / "source.txt"
        src.write_text("content")

        with patch("folder_hasher.sync.copy_file", side_effect=OSError("Disk full")):
            error = safe_copy_file(src, temp_dir / "dest.txt", "source.txt")

        assert "Disk full" in error.error


class TestExecuteSync:
    """Tests for execute_sync function."""

    def test_copies_nested_path(self, sample_folders):
        source, target = sample_folders
        records, _ = scan_folder(source, progress=False)

        result = execute_sync(["sub/dir/only_in_source.txt"], records, target, progress=False)

        assert result.copied == ["sub/dir/only_in_source.txt"]
        assert result.errors == []
        assert (target / "sub" / "dir" / "only_in_source.txt").read_text() == "only in source"

    def test_overwrites_mismatched(self, sample_folders):
        source, target = sample_folders
        records, _ = scan_folder(source, HashAlgorithm.MD5, progress=False)

        execute_sync(["conflict.txt"], records, target, progress=False)

        assert (target / "conflict.txt").read_text() == "content from source"

    def test_failure_does_not_abort_remaining(self, sample_folders):
        source, target = sample_folders
        records, _ = scan_folder(source, progress=False)
        (source / "conflict.txt").unlink()

        result = execute_sync(
            ["conflict.txt", "sub/dir/only_in_source.txt"], records, target, progress=False
        )

        assert result.copied == ["sub/dir/only_in_source.txt"]
        assert [e.relative_path for e in result.errors] == ["conflict.txt"]
        assert (target / "conflict.txt").read_text() == "content from target"

    def test_unknown_path_is_an_error(self, temp_dir):
        result = execute_sync(["ghost.txt"], {}, temp_dir, progress=False)

        assert result.copied_count == 0
        assert result.errors[0].relative_path == "ghost.txt"

    def test_empty_sync_list(self, temp_dir):
        result = execute_sync([], {}, temp_dir, progress=False)
        assert result.copied == []
        assert result.errors == []
        assert isinstance(result, SyncResult)


class TestSymlinkedDestinations:
    """Sync never writes through links into files outside the target."""

    @pytest.fixture
    def linked_target(self, temp_dir):
        source = temp_dir / "source"
        target = temp_dir / "target"
        source.mkdir()
        target.mkdir()
        outside = temp_dir / "outside.txt"
        outside.write_text("precious")
        (source / "a.txt").write_text("from source")
        try:
            (target / "a.txt").symlink_to(outside)
        except (OSError, NotImplementedError):
            pytest.skip("cannot create symlinks")
        return source, target, outside

    def test_copy_file_replaces_symlink(self, linked_target):
        source, target, outside = linked_target

        copy_file(source / "a.txt", target / "a.txt")

        assert not (target / "a.txt").is_symlink()
        assert (target / "a.txt").read_text() == "from source"
        assert outside.read_text() == "precious"

    def test_compare_sync_leaves_link_target_alone(self, linked_target):
        source, target, outside = linked_target

        result = compare_folders(source, target, sync=True, progress=False)

        assert result.copied == ["a.txt"]
        assert outside.read_text() == "precious"
        assert (target / "a.txt").read_text() == "from source"

    def test_symlinked_directory_is_refused(self, temp_dir):
        source = temp_dir / "source"
        target = temp_dir / "target"
        outside = temp_dir / "outside"
        (source / "sub").mkdir(parents=True)
        target.mkdir()
        outside.mkdir()
        (source / "sub" / "b.txt").write_text("from source")
        try:
            (target / "sub").symlink_to(outside, target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("cannot create symlinks")
        records, _ = scan_folder(source, progress=False)

        result = execute_sync(["sub/b.txt"], records, target, progress=False)

        assert result.copied == []
        assert "outside the target" in result.errors[0].error
        assert not (outside / "b.txt").exists()


class TestIsInside:

    def test_plain_path(self, temp_dir):
        assert is_inside(temp_dir / "a" / "b.txt", temp_dir)

    def test_parent_escape(self, temp_dir):
        assert not is_inside(temp_dir / ".." / "b.txt", temp_dir)
