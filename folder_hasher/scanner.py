"""Folder walking and file hashing."""

import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, Iterator

from tqdm import tqdm

from .models import HashAlgorithm, HashRecord, HashSet


def _long_path(path: Path, resolve: bool = True) -> str:
    """Convert path to long path format on Windows to handle paths > 260 chars."""
    path_str = str(path.resolve() if resolve else path.absolute())
    if os.name == 'nt' and not path_str.startswith('\\\\?\\'):
        return '\\\\?\\' + path_str
    return path_str


class ScanError:
    """Record of a file that failed to hash."""

    def __init__(self, relative_path: str, absolute_path: str, error: str):
        self.relative_path = relative_path
        self.absolute_path = absolute_path
        self.error = error


def compute_file_hash(
    file_path: Path,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    chunk_size: int = 65536
) -> str:
    """Compute the hex digest of a file with the given algorithm."""
    hasher = algorithm.new()
    with open(_long_path(Path(file_path)), 'rb') as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


def walk_folder(
    folder_path: Path,
    exclude: Iterable[Path] = (),
    onerror: Callable[[OSError], None] | None = None
) -> Iterator[tuple[Path, str]]:
    """
    Lazily yield ``(absolute_path, relative_path)`` for every file under a folder.

    Relative paths always use forward slashes. Directories and files are visited
    in sorted order. Symbolic links are skipped and never followed, so link
    loops cannot occur. Paths listed in ``exclude`` are left out. Directories
    that cannot be listed are passed to ``onerror``, like :func:`os.walk`.
    """
    folder_path = Path(folder_path)
    excluded = {Path(p).resolve() for p in exclude}

    for root, dirnames, filenames in os.walk(folder_path, onerror=onerror):
        dirnames[:] = sorted(
            d for d in dirnames if not os.path.islink(os.path.join(root, d))
        )
        for filename in sorted(filenames):
            abs_path = Path(root) / filename
            if abs_path.is_symlink():
                continue
            if excluded and abs_path.resolve() in excluded:
                continue
            yield abs_path, abs_path.relative_to(folder_path).as_posix()


def get_hash_record(
    base_path: Path,
    relative_path: str,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256
) -> HashRecord:
    """Hash one file below ``base_path``."""
    abs_path = base_path / relative_path
    return HashRecord(
        relative_path=relative_path,
        hash=compute_file_hash(abs_path, algorithm),
        algorithm=algorithm,
        absolute_path=str(abs_path),
    )


def scan_folder(
    folder_path: Path,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    desc: str = "Hashing",
    on_error: str = "skip",
    workers: int = 1,
    exclude: Iterable[Path] = (),
    progress: bool = True
) -> tuple[HashSet, list[ScanError]]:
    """
    Hash every file in a folder.

    Args:
        folder_path: Path to the folder to scan
        algorithm: Digest algorithm applied to every file
        desc: Description for the progress bar
        on_error: How to handle unreadable files - "skip" to record and
            continue, "fail" to raise
        workers: Number of hashing threads
        exclude: Absolute paths to leave out (e.g. the manifest itself)
        progress: Show a progress bar

    Returns:
        Tuple of (hash set sorted by relative path, list of scan errors)
    """
    folder_path = Path(folder_path).absolute()
    files: HashSet = {}
    errors: list[ScanError] = []

    def record_error(rel_path: str, exc: OSError) -> None:
        errors.append(ScanError(rel_path, str(folder_path / rel_path), str(exc)))
        if on_error == "fail":
            print(f"\nError reading: {rel_path}", file=sys.stderr)
            print(f"  {exc}", file=sys.stderr)
            raise exc

    def walk_error(exc: OSError) -> None:
        # Unlistable directory, reported by its path relative to the root
        rel_path = Path(os.path.relpath(exc.filename or folder_path, folder_path)).as_posix()
        record_error(rel_path, exc)

    # First, collect all file paths
    all_files = [rel_path for _, rel_path in walk_folder(folder_path, exclude, walk_error)]

    # Then hash with progress bar
    with tqdm(total=len(all_files), desc=desc, unit="file", disable=not progress) as pbar:
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(get_hash_record, folder_path, rel_path, algorithm): rel_path
                    for rel_path in all_files
                }
                for future in as_completed(futures):
                    rel_path = futures[future]
                    try:
                        files[rel_path] = future.result()
                    except OSError as e:
                        if on_error == "fail":
                            executor.shutdown(cancel_futures=True)
                        record_error(rel_path, e)
                    pbar.update(1)
        else:
            for rel_path in all_files:
                try:
                    files[rel_path] = get_hash_record(folder_path, rel_path, algorithm)
                except OSError as e:
                    record_error(rel_path, e)
                pbar.update(1)

    # Completion order is arbitrary with several workers
    files = dict(sorted(files.items()))
    errors.sort(key=lambda e: e.relative_path)
    return files, errors
