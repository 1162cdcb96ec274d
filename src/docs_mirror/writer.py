from __future__ import annotations

from pathlib import Path

from .errors import PathTraversalError


class FileWriter:
    """Writes Markdown files beneath a fixed output root."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def resolve(self, rel_path: str) -> Path:
        root = self.root.resolve()
        target = (root / rel_path).resolve()
        if target != root and root not in target.parents:
            raise PathTraversalError(f"Path traversal detected: {rel_path}")
        if target == root:
            raise PathTraversalError(f"Not a file path: {rel_path}")
        return target

    def save(self, rel_path: str, content: str) -> Path:
        target = self.resolve(rel_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8", newline="\n")
        return target
