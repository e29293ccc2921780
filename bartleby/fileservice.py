"""Filesystem helpers rooted at the build output directory."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional

from .logging import get_logger


class FileService:
    """Writes and copies build artifacts relative to ``output_root``."""

    def __init__(self, output_root: Path) -> None:
        self.output_root = output_root
        self.logger = get_logger("files")

    def resolve(self, relative: str | Path) -> Path:
        return self.output_root / str(relative).lstrip("/")

    def save_file(self, relative: str | Path, content: str) -> Path:
        target = self.resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    def copy_file(self, source: Path, relative: str | Path) -> Optional[Path]:
        if not source.is_file():
            self.logger.debug("Skipping copy of missing file %s", source)
            return None
        target = self.resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        return target

    def copy_dir(self, source: Path, relative: str | Path) -> Optional[Path]:
        if not source.is_dir():
            self.logger.debug("Skipping copy of missing directory %s", source)
            return None
        target = self.resolve(relative)
        shutil.copytree(source, target, dirs_exist_ok=True)
        return target

    @staticmethod
    def exists(path: Path) -> bool:
        return path.exists()

    @staticmethod
    def glob(root: Path, pattern: str) -> List[Path]:
        if not root.is_dir():
            return []
        return sorted(root.glob(pattern))


__all__ = ["FileService"]
