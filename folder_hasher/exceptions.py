"""Exceptions raised by folder hasher operations."""


class FolderHasherError(Exception):
    """Base class for fatal folder hasher errors."""


class PathNotFoundError(FolderHasherError):
    """Raised when a folder or manifest file does not exist."""

    def __init__(self, path, kind: str = "Path"):
        self.path = path
        self.kind = kind
        super().__init__(f"{kind} does not exist: {path}")


class ManifestFormatError(FolderHasherError):
    """Raised when a manifest file cannot be parsed."""

    def __init__(self, path, message: str, row: int | None = None):
        self.path = path
        self.row = row
        self.message = message
        location = f" {path}" if path is not None else ""
        if row is not None:
            location += f" (row {row})"
        super().__init__(f"Malformed manifest{location}: {message}")


class AlgorithmMismatchError(FolderHasherError):
    """Raised when hash sets built with different algorithms are compared."""
