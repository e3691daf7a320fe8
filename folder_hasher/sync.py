"""One-way copy of files from a source folder to a target folder."""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from tqdm import tqdm

from .models import HashSet
from .scanner import _long_path


class CopyError:
    """Record of a file that failed to copy."""

    def __init__(self, relative_path: str, src_path: str, dst_path: str, error: str):
        self.relative_path = relative_path
        self.src_path = src_path
        self.dst_path = dst_path
        self.error = error


@dataclass
class SyncResult:
    """Files copied and files that failed during one sync run."""
    copied: list[str] = field(default_factory=list)
    errors: list[CopyError] = field(default_factory=list)

    @property
    def copied_count(self) -> int:
        return len(self.copied)


def copy_file(src: Path, dst: Path) -> None:
    """
    Copy a file, creating parent directories if needed and overwriting dst.

    A symlink at dst is replaced by a regular file; its target is left alone.
    """
    # Use long path format on Windows, without resolving dst through links
    dst_long = _long_path(dst, resolve=False)
    dst_parent = os.path.dirname(dst_long)
    os.makedirs(dst_parent, exist_ok=True)
    if os.path.islink(dst_long):
        os.unlink(dst_long)
    shutil.copy2(_long_path(src), dst_long)


def is_inside(path: Path, root: Path) -> bool:
    """Whether path's directory, with links resolved, lies within root."""
    real_root = os.path.realpath(root)
    real_parent = os.path.realpath(Path(path).parent)
    try:
        return os.path.commonpath([real_root, real_parent]) == real_root
    except ValueError:
        # Different drives on Windows
        return False


def safe_copy_file(src: Path, dst: Path, relative_path: str) -> CopyError | None:
    """
    Copy a file safely, returning a CopyError if the copy fails.
    Returns None on success.
    """
    try:
        copy_file(src, dst)
        return None
    except (OSError, shutil.Error) as e:
        return CopyError(relative_path, str(src), str(dst), str(e))


def execute_sync(
    sync_list: Iterable[str],
    source: HashSet,
    target_root: Path,
    progress: bool = True
) -> SyncResult:
    """
    Copy each listed relative path from the source hash set into target_root.

    A failure on one file is recorded and the remaining files are still copied.
    """
    sync_list = list(sync_list)
    target_root = Path(target_root)
    result = SyncResult()

    with tqdm(sync_list, desc="Copying", unit="file", disable=not progress) as pbar:
        for rel_path in pbar:
            dst = target_root / rel_path
            record = source.get(rel_path)
            if record is None:
                result.errors.append(
                    CopyError(rel_path, "", str(dst), "Path is not part of the source hash set")
                )
                continue
            if not is_inside(dst, target_root):
                result.errors.append(
                    CopyError(
                        rel_path, record.absolute_path, str(dst),
                        "Destination resolves outside the target folder"
                    )
                )
                continue
            error = safe_copy_file(Path(record.absolute_path), dst, rel_path)
            if error:
                result.errors.append(error)
            else:
                result.copied.append(rel_path)

    return result
