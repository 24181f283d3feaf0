"""Per-session working directory shared by the filesystem tools."""

from __future__ import annotations

from pathlib import Path

PROTECTED_PATHS = frozenset({".git", "node_modules"})


class Workspace:
    """Holds the current base directory for one agent session.

    Relative tool paths resolve against `base_dir`. Navigation only updates
    this object, so concurrent sessions never observe each other's moves and
    the process working directory stays untouched.
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self.base_dir = Path(base_dir).resolve() if base_dir else Path.cwd()

    def resolve(self, path: str | Path) -> Path:
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            return candidate
        return self.base_dir / candidate

    def change_directory(self, path: str | Path) -> Path:
        target = self.resolve(path)
        if not target.exists():
            raise FileNotFoundError(f"No such file or directory: {path}")
        if not target.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")
        self.base_dir = target.resolve()
        return self.base_dir

    @staticmethod
    def is_protected(path: str | None) -> bool:
        if path is None:
            return False
        return path.strip() in PROTECTED_PATHS
