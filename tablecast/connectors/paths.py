"""Containment checks for paths read from or written to a working root.

A candidate path starts Unresolved and ends either Resolved (a path or archive
entry name inside the root, used for one open) or Rejected (``SecurityError``).
Rejected paths are never re-rooted.
"""

import os
import posixpath
import re
from pathlib import Path
from typing import Union

from tablecast.core.exceptions import SecurityError

PathLike = Union[str, "os.PathLike[str]"]

_DRIVE = re.compile(r"^[A-Za-z]:")


class PathResolver:
    """Resolve candidate paths against a working root.

    Filesystem paths are resolved with symlinks followed, then must lie under
    the root. Archive entry names are normalised to forward slashes and must
    stay inside the archive.
    """

    def __init__(self, root: PathLike):
        self.root = Path(root).resolve()

    def resolve(self, candidate: PathLike) -> Path:
        """Return ``candidate`` as an absolute path inside the root.

        Raises:
            SecurityError: If the path is empty or escapes the root.
        """
        text = os.fspath(candidate)
        if not text or "\x00" in text:
            raise SecurityError(
                "Invalid path", context={"path": repr(text), "root": self.root}
            )

        path = Path(text)
        if not path.is_absolute():
            path = self.root / path
        resolved = path.resolve()

        if not self.contains(resolved):
            raise SecurityError(
                "Path escapes the working root",
                context={"path": text, "root": self.root},
            )
        return resolved

    def contains(self, path: PathLike) -> bool:
        resolved = Path(path).resolve()
        return resolved == self.root or self.root in resolved.parents

    @staticmethod
    def resolve_member(candidate: str) -> str:
        """Return the normalised name of an archive entry.

        Backslashes are treated as separators, so ``..\\evil.csv`` is caught
        the same way as ``../evil.csv``.

        Raises:
            SecurityError: If the entry is absolute or escapes the archive.
        """
        if not candidate or "\x00" in candidate:
            raise SecurityError("Invalid archive entry", context={"entry": repr(candidate)})

        name = candidate.replace("\\", "/")
        if name.startswith("/") or _DRIVE.match(name):
            raise SecurityError(
                "Absolute archive entry is not allowed", context={"entry": candidate}
            )

        normalized = posixpath.normpath(name)
        if normalized in (".", "..") or normalized.startswith("../"):
            raise SecurityError(
                "Archive entry escapes the archive", context={"entry": candidate}
            )
        return normalized

    def is_safe(self, candidate: PathLike) -> bool:
        try:
            self.resolve(candidate)
        except SecurityError:
            return False
        return True
