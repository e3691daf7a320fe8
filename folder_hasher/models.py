"""Data models for folder hasher."""

import hashlib
from dataclasses import dataclass, asdict, field
from enum import Enum

import xxhash


class HashAlgorithm(Enum):
    """Supported digest algorithms."""
    MD5 = "MD5"
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    XXH64 = "XXH64"  # Fast non-cryptographic hash

    @classmethod
    def parse(cls, text: str) -> "HashAlgorithm":
        """Look up an algorithm by name, ignoring case and dashes (``sha-256``)."""
        key = text.strip().upper().replace("-", "")
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise ValueError(f"Unknown hash algorithm: {text!r} (choose from {choices})") from None

    def new(self):
        """Return a fresh incremental hasher for this algorithm."""
        if self is HashAlgorithm.XXH64:
            return xxhash.xxh64()
        return hashlib.new(self.value.lower())


class DiffStatus(Enum):
    """Classification of one relative path across two hash sets."""
    MATCH = "match"
    MISMATCH = "mismatch"
    MISSING = "missing"
    NEW = "new"

    def label(self, side: str) -> str:
        """Human-readable status, e.g. ``MISSING in target``."""
        if self in (DiffStatus.MISSING, DiffStatus.NEW):
            return f"{self.name} in {side}"
        return self.name

    def code(self, side: str) -> str:
        """Machine-readable status, e.g. ``MISSING_IN_TARGET``."""
        if self in (DiffStatus.MISSING, DiffStatus.NEW):
            return f"{self.name}_IN_{side.upper()}"
        return self.name


class NewFilePolicy(Enum):
    """Whether files present only on the right side count as errors."""
    ERROR = "error"
    INFO = "info"


@dataclass
class HashRecord:
    """Digest of one file, keyed by its path relative to the scanned root."""
    relative_path: str
    hash: str
    algorithm: HashAlgorithm
    absolute_path: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["algorithm"] = self.algorithm.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "HashRecord":
        data = dict(data)
        data["algorithm"] = HashAlgorithm.parse(data["algorithm"])
        return cls(**data)


# Relative path -> record, as produced by scanning a folder or loading a manifest.
HashSet = dict[str, HashRecord]


@dataclass(frozen=True)
class DiffEntry:
    """Outcome for one relative path of a reconciliation run."""
    relative_path: str
    status: DiffStatus
    left_hash: str | None = None
    right_hash: str | None = None


@dataclass
class ReconcileResult:
    """Everything one reconciliation run produces."""
    entries: list[DiffEntry]
    error_count: int
    sync_list: list[str]
    right_name: str = "target"
    counts: dict[DiffStatus, int] = field(default_factory=dict)

    def count(self, status: DiffStatus) -> int:
        return self.counts.get(status, 0)
