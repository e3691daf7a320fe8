"""
Folder Hasher - A CLI tool to hash, verify and compare folder trees.

Features:
- Hash manifests (CSV) for a whole folder tree
- Verification of a tree against a saved manifest
- Comparison of two trees (missing, mismatched and new files)
- One-way sync of a target folder from a source folder
- MD5, SHA1, SHA256, SHA384, SHA512 and xxhash64 digests
- Progress visualization
"""

__version__ = "1.0.0"
