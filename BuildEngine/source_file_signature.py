"""
Source File Signature - Cheap change detection for catalog source files.

A signature is the relative path, the size in bytes and the modification
time (integer nanoseconds). Two captures of an unchanged file compare equal;
any cache record whose stored signature differs from a fresh capture is
treated as if it did not exist. File contents are never hashed.
"""

import base64
import hashlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath


@dataclass(frozen=True)
class SourceFileSignature:
    path: str  # POSIX-style, relative to the catalog root
    size: int  # Bytes
    modified: int  # st_mtime_ns

    @classmethod
    def capture(cls, catalog_dir: str | Path, relative_path: str | Path) -> "SourceFileSignature":
        """
        Read the signature of a file from disk.

        Raises:
            OSError: The file is missing or inaccessible
        """
        stat = (Path(catalog_dir) / relative_path).stat()
        posix = PurePosixPath(*Path(relative_path).parts).as_posix()
        return cls(path=posix, size=stat.st_size, modified=stat.st_mtime_ns)

    def hash_key(self) -> str:
        """Short URL-safe digest, stable across runs, used to name cache files."""
        digest = hashlib.sha256(f"{self.path}\0{self.size}\0{self.modified}".encode()).digest()
        return base64.urlsafe_b64encode(digest[:15]).decode("ascii")

    def to_dict(self) -> dict:
        return {"path": self.path, "size": self.size, "modified": self.modified}

    @classmethod
    def from_dict(cls, data: dict) -> "SourceFileSignature":
        return cls(path=str(data["path"]), size=int(data["size"]), modified=int(data["modified"]))
