"""The generate, verify and compare operations with their console reports."""

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional

from .exceptions import PathNotFoundError
from .manifest import load_manifest, manifest_root, save_diff_report, save_manifest
from .models import DiffStatus, HashAlgorithm, HashSet, NewFilePolicy, ReconcileResult
from .reconciler import compare, hash_set_algorithm, verify
from .scanner import ScanError, scan_folder
from .sync import CopyError, execute_sync


@dataclass
class OperationResult:
    """Outcome of one command, with the error total used for the exit code."""
    error_count: int = 0
    files: int = 0
    reconcile: Optional[ReconcileResult] = None
    scan_errors: list[ScanError] = field(default_factory=list)
    copy_errors: list[CopyError] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)


def print_banner(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def require_folder(path: Path, kind: str = "Folder") -> None:
    """Raise PathNotFoundError unless path is an existing directory."""
    if not path.is_dir():
        raise PathNotFoundError(path, kind)


def confirm_sync(count: int, target: Path) -> bool:
    """Prompt user to confirm copying files into the target folder."""
    try:
        response = input(f"\nCopy {count} file(s) from source into {target}? (y/N): ").strip().lower()
    except EOFError:
        # No stdin, e.g. piped or scripted runs
        print()
        return False
    return response == 'y'


def report_scan_errors(scan_errors: list[tuple[str, ScanError]]) -> None:
    if not scan_errors:
        return
    print(f"\n--- Hash Errors ({len(scan_errors)} files skipped) ---")
    for folder_name, error in scan_errors[:10]:  # Show first 10
        print(f"  [{folder_name}] {error.relative_path}")
        print(f"    {error.error}")
    if len(scan_errors) > 10:
        print(f"  ... and {len(scan_errors) - 10} more errors")
    print("-" * 20)


def report_copy_errors(copy_errors: list[CopyError]) -> None:
    if not copy_errors:
        return
    print(f"\n--- Copy Errors ({len(copy_errors)} files failed) ---")
    for error in copy_errors[:10]:  # Show first 10
        print(f"  {error.relative_path}")
        print(f"    {error.error}")
    if len(copy_errors) > 10:
        print(f"  ... and {len(copy_errors) - 10} more errors")
    print("-" * 20)


def report_diff(result: ReconcileResult) -> None:
    """Print one classification line per relative path, then the counts."""
    side = result.right_name
    for entry in result.entries:
        print(f"  {entry.status.label(side):<18} {entry.relative_path}")

    print(f"\n--- Summary ---")
    print(f"Matching files: {result.count(DiffStatus.MATCH)}")
    print(f"Mismatched files: {result.count(DiffStatus.MISMATCH)}")
    print(f"Missing in {side}: {result.count(DiffStatus.MISSING)}")
    print(f"New in {side}: {result.count(DiffStatus.NEW)}")
    print("-" * 20)


def _drop_paths(records: HashSet, paths: set[str]) -> HashSet:
    # Unreadable files and directories are reported as hash errors, not as missing
    def failed(rel_path: str) -> bool:
        if rel_path in paths:
            return True
        return any(str(parent) in paths for parent in PurePosixPath(rel_path).parents)

    return {k: v for k, v in records.items() if not failed(k)}


def generate_hashes(
    folder: Path,
    manifest: Path,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    workers: int = 1,
    on_error: str = "skip",
    progress: bool = True
) -> OperationResult:
    """Hash every file in folder and save the manifest."""
    folder = Path(folder).absolute()
    manifest = Path(manifest).absolute()
    require_folder(folder)

    print_banner("GENERATE HASHES")
    print(f"Folder:    {folder}")
    print(f"Manifest:  {manifest}")
    print(f"Algorithm: {algorithm.value}")

    records, errors = scan_folder(
        folder, algorithm, "Hashing", on_error=on_error, workers=workers,
        exclude=[manifest], progress=progress
    )
    save_manifest(records.values(), manifest)

    report_scan_errors([("folder", e) for e in errors])
    print(f"\nHashed {len(records)} files, {len(errors)} errors.")
    print(f"Manifest saved to: {manifest}")

    return OperationResult(error_count=len(errors), files=len(records), scan_errors=errors)


def verify_hashes(
    manifest: Path,
    new_files: NewFilePolicy = NewFilePolicy.INFO,
    workers: int = 1,
    on_error: str = "skip",
    progress: bool = True
) -> OperationResult:
    """
    Re-hash the folder a manifest was generated from and check it against
    the stored hashes.

    Each file is re-hashed with the algorithm recorded in the manifest.
    """
    manifest = Path(manifest).absolute()
    stored = load_manifest(manifest)
    folder = manifest_root(stored, manifest)
    require_folder(folder)
    algorithm = hash_set_algorithm(stored)

    print_banner("VERIFY HASHES")
    print(f"Manifest:  {manifest}")
    print(f"Folder:    {folder}")
    print(f"Algorithm: {algorithm.value}")

    current, errors = scan_folder(
        folder, algorithm, "Hashing", on_error=on_error, workers=workers,
        exclude=[manifest], progress=progress
    )
    failed = {e.relative_path for e in errors}
    result = verify(_drop_paths(stored, failed), current, new_files=new_files)

    print()
    report_diff(result)
    report_scan_errors([("current", e) for e in errors])

    total_errors = result.error_count + len(errors)
    print(f"\nTotal errors: {total_errors}")
    return OperationResult(
        error_count=total_errors,
        files=len(current),
        reconcile=result,
        scan_errors=errors,
    )


def compare_folders(
    source: Path,
    target: Path,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    save: Optional[Path] = None,
    sync: Optional[bool] = None,
    new_files: NewFilePolicy = NewFilePolicy.ERROR,
    workers: int = 1,
    on_error: str = "skip",
    progress: bool = True
) -> OperationResult:
    """
    Compare a target folder against a source folder.

    Missing and mismatched files can then be copied from source into target.
    ``sync=None`` asks the user before copying; True or False skips the prompt.
    """
    source = Path(source).absolute()
    target = Path(target).absolute()
    require_folder(source, "Source folder")
    require_folder(target, "Target folder")
    exclude = [Path(save).absolute()] if save else []

    print_banner("COMPARE FOLDERS")
    print(f"Source:    {source}")
    print(f"Target:    {target}")
    print(f"Algorithm: {algorithm.value}")

    source_records, source_errors = scan_folder(
        source, algorithm, "Hashing source", on_error=on_error, workers=workers,
        exclude=exclude, progress=progress
    )
    target_records, target_errors = scan_folder(
        target, algorithm, "Hashing target", on_error=on_error, workers=workers,
        exclude=exclude, progress=progress
    )
    failed = {e.relative_path for e in source_errors + target_errors}
    result = compare(
        _drop_paths(source_records, failed),
        _drop_paths(target_records, failed),
        new_files=new_files,
    )

    print()
    report_diff(result)
    scan_errors = [("source", e) for e in source_errors] + [("target", e) for e in target_errors]
    report_scan_errors(scan_errors)

    if save:
        save_diff_report(result.entries, Path(save), result.right_name)
        print(f"Diff report saved to: {Path(save).absolute()}")

    outcome = OperationResult(
        files=len(source_records) + len(target_records),
        reconcile=result,
        scan_errors=source_errors + target_errors,
    )

    if result.sync_list:
        if sync is None:
            sync = confirm_sync(len(result.sync_list), target)
        if sync:
            print_banner("SYNC")
            sync_result = execute_sync(result.sync_list, source_records, target, progress=progress)
            outcome.copied = sync_result.copied
            outcome.copy_errors = sync_result.errors
            report_copy_errors(sync_result.errors)
            print(f"\nCopied {sync_result.copied_count} of {len(result.sync_list)} files.")
        else:
            print("Sync skipped.")

    outcome.error_count = result.error_count + len(outcome.scan_errors) + len(outcome.copy_errors)
    print(f"\nTotal errors: {outcome.error_count}")
    return outcome
