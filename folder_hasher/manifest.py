"""CSV persistence for hash manifests and diff reports."""

import csv
from pathlib import Path, PurePosixPath
from typing import Iterable

from .exceptions import ManifestFormatError, PathNotFoundError
from .models import DiffEntry, HashAlgorithm, HashRecord, HashSet

MANIFEST_COLUMNS = ["Hash", "FilePath", "Relative", "Algorithm"]
REPORT_COLUMNS = ["Status", "RelativePath", "SourceHash", "TargetHash"]


def save_manifest(records: Iterable[HashRecord], path: Path) -> None:
    """Write records to a CSV manifest, one row per file, sorted by relative path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=MANIFEST_COLUMNS)
        writer.writeheader()
        for record in sorted(records, key=lambda r: r.relative_path):
            writer.writerow({
                "Hash": record.hash,
                "FilePath": record.absolute_path,
                "Relative": record.relative_path,
                "Algorithm": record.algorithm.value,
            })


def load_manifest(path: Path) -> HashSet:
    """
    Read a CSV manifest written by :func:`save_manifest`.

    Raises:
        PathNotFoundError: The manifest file does not exist
        ManifestFormatError: A required column or value is missing, an
            algorithm is unknown, a relative path appears twice, or the
            file is not valid UTF-8 CSV
    """
    path = Path(path)
    if not path.is_file():
        raise PathNotFoundError(path, "Manifest file")

    records: HashSet = {}
    try:
        _read_manifest_rows(path, records)
    except (UnicodeDecodeError, csv.Error) as e:
        raise ManifestFormatError(path, f"not a readable UTF-8 CSV file ({e})") from None

    return records


def _read_manifest_rows(path: Path, records: HashSet) -> None:
    # utf-8-sig accepts the byte order mark spreadsheets tend to write
    with path.open(newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ManifestFormatError(path, "file is empty, header row required")
        missing = [c for c in MANIFEST_COLUMNS if c not in reader.fieldnames]
        if missing:
            raise ManifestFormatError(path, f"missing columns: {', '.join(missing)}")

        # Row 1 is the header
        for row_number, row in enumerate(reader, start=2):
            values = {c: (row.get(c) or "").strip() for c in MANIFEST_COLUMNS}
            empty = [c for c, v in values.items() if not v]
            if empty:
                raise ManifestFormatError(path, f"empty value for {', '.join(empty)}", row_number)
            try:
                algorithm = HashAlgorithm.parse(values["Algorithm"])
            except ValueError as e:
                raise ManifestFormatError(path, str(e), row_number) from None

            relative = PurePosixPath(values["Relative"].replace("\\", "/")).as_posix()
            if relative in records:
                raise ManifestFormatError(path, f"duplicate relative path {relative!r}", row_number)
            records[relative] = HashRecord(
                relative_path=relative,
                hash=values["Hash"].lower(),
                algorithm=algorithm,
                absolute_path=values["FilePath"],
            )


def manifest_root(records: HashSet, manifest_path: Path | None = None) -> Path:
    """
    Return the folder a manifest was generated from.

    The root is each recorded absolute path with its relative path stripped
    from the end; every record must point at the same root.
    """
    roots = set()
    for record in records.values():
        abs_path = Path(record.absolute_path)
        depth = len(PurePosixPath(record.relative_path).parts)
        if abs_path.parts[-depth:] != PurePosixPath(record.relative_path).parts:
            raise ManifestFormatError(
                manifest_path,
                f"path {record.absolute_path!r} does not end with {record.relative_path!r}"
            )
        roots.add(abs_path.parents[depth - 1])

    if not roots:
        raise ManifestFormatError(manifest_path, "no records, cannot determine the folder to verify")
    if len(roots) > 1:
        listed = ", ".join(sorted(str(r) for r in roots))
        raise ManifestFormatError(manifest_path, f"records point at several folders: {listed}")
    return roots.pop()


def save_diff_report(entries: Iterable[DiffEntry], path: Path, right_name: str = "target") -> None:
    """Write a reconciliation diff as CSV, one row per relative path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=REPORT_COLUMNS)
        writer.writeheader()
        for entry in entries:
            writer.writerow({
                "Status": entry.status.code(right_name),
                "RelativePath": entry.relative_path,
                "SourceHash": entry.left_hash or "",
                "TargetHash": entry.right_hash or "",
            })
