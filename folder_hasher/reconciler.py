"""Reconciliation of two hash sets."""

from typing import Optional

from .exceptions import AlgorithmMismatchError
from .models import (
    DiffEntry,
    DiffStatus,
    HashAlgorithm,
    HashSet,
    NewFilePolicy,
    ReconcileResult,
)


def hash_set_algorithm(records: HashSet) -> Optional[HashAlgorithm]:
    """Return the algorithm shared by all records, or None for an empty set."""
    algorithms = {record.algorithm for record in records.values()}
    if len(algorithms) > 1:
        names = ", ".join(sorted(a.value for a in algorithms))
        raise AlgorithmMismatchError(f"Hash set mixes algorithms: {names}")
    return algorithms.pop() if algorithms else None


def reconcile(
    left: HashSet,
    right: HashSet,
    right_name: str = "target",
    new_files: NewFilePolicy = NewFilePolicy.ERROR
) -> ReconcileResult:
    """
    Classify every relative path found in either hash set.

    ``left`` is the reference side. Paths whose content differs or that are
    absent on the right are errors and land in the sync list, meaning the
    right side should receive the left side's file. Paths only on the right
    are reported as NEW; they count as errors only under
    ``NewFilePolicy.ERROR`` and are never synced (nothing is deleted).
    Entries are ordered by relative path.
    """
    left_algorithm = hash_set_algorithm(left)
    right_algorithm = hash_set_algorithm(right)
    if left_algorithm and right_algorithm and left_algorithm != right_algorithm:
        raise AlgorithmMismatchError(
            f"Cannot compare {left_algorithm.value} hashes with {right_algorithm.value} hashes"
        )

    entries = []
    sync_list = []
    counts = {status: 0 for status in DiffStatus}

    for path in sorted(left.keys() | right.keys()):
        left_record = left.get(path)
        right_record = right.get(path)

        if left_record and right_record:
            if left_record.hash.lower() == right_record.hash.lower():
                status = DiffStatus.MATCH
            else:
                status = DiffStatus.MISMATCH
                sync_list.append(path)
        elif left_record:
            status = DiffStatus.MISSING
            sync_list.append(path)
        else:
            status = DiffStatus.NEW

        counts[status] += 1
        entries.append(DiffEntry(
            relative_path=path,
            status=status,
            left_hash=left_record.hash if left_record else None,
            right_hash=right_record.hash if right_record else None,
        ))

    error_count = counts[DiffStatus.MISMATCH] + counts[DiffStatus.MISSING]
    if new_files is NewFilePolicy.ERROR:
        error_count += counts[DiffStatus.NEW]

    return ReconcileResult(
        entries=entries,
        error_count=error_count,
        sync_list=sync_list,
        right_name=right_name,
        counts=counts,
    )


def verify(
    stored: HashSet,
    current: HashSet,
    new_files: NewFilePolicy = NewFilePolicy.INFO
) -> ReconcileResult:
    """Check a freshly hashed folder against its stored manifest."""
    result = reconcile(stored, current, right_name="current", new_files=new_files)
    # Verification never copies anything
    result.sync_list = []
    return result


def compare(
    source: HashSet,
    target: HashSet,
    new_files: NewFilePolicy = NewFilePolicy.ERROR
) -> ReconcileResult:
    """Compare a target folder against a source of truth."""
    return reconcile(source, target, right_name="target", new_files=new_files)
