"""Shared test fixtures."""

import tempfile
from pathlib import Path

import pytest

from folder_hasher.models import HashAlgorithm, HashRecord


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_folders(temp_dir):
    """Create a source and a target folder that differ in every possible way."""
    source = temp_dir / "source"
    target = temp_dir / "target"

    source.mkdir()
    target.mkdir()

    # Identical in both
    (source / "identical.txt").write_text("same content")
    (target / "identical.txt").write_text("same content")

    # Same name, different content
    (source / "conflict.txt").write_text("content from source")
    (target / "conflict.txt").write_text("content from target")

    # Only in source, nested
    (source / "sub" / "dir").mkdir(parents=True)
    (source / "sub" / "dir" / "only_in_source.txt").write_text("only in source")

    # Only in target
    (target / "only_in_target.txt").write_text("only in target")

    return source, target


def make_hash_set(hashes, algorithm=HashAlgorithm.SHA256, root="/root"):
    """Build a hash set from a {relative_path: hash} mapping."""
    return {
        rel: HashRecord(
            relative_path=rel,
            hash=value,
            algorithm=algorithm,
            absolute_path=f"{root}/{rel}",
        )
        for rel, value in hashes.items()
    }


@pytest.fixture
def sample_record():
    """Create a sample HashRecord for testing."""
    return HashRecord(
        relative_path="test/file.txt",
        hash="abc123def456",
        algorithm=HashAlgorithm.SHA256,
        absolute_path="/absolute/test/file.txt",
    )
