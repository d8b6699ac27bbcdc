"""Destinations for exported images and label files."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol

from annostudio.core.io.fs import write_text_atomic
from annostudio.core.io.images import reencode_jpeg


class DatasetSink(Protocol):
    """Storage collaborator: keys are dataset-relative POSIX paths."""
    root: Path

    def put_image(self, source: str | Path, key: str) -> None: ...
    def put_text(self, key: str, text: str) -> None: ...


class LocalDatasetSink:
    """Writes the dataset tree under a local directory."""

    def __init__(self, root: str | Path, *, reencode: bool = False, jpeg_quality: int = 95) -> None:
        self.root = Path(root)
        self.reencode = reencode
        self.jpeg_quality = jpeg_quality

    def _dest(self, key: str) -> Path:
        dest = (self.root / key).resolve()
        if self.root.resolve() not in dest.parents:
            raise ValueError(f"Key escapes dataset root: {key}")
        return dest

    def put_image(self, source: str | Path, key: str) -> None:
        dest = self._dest(key)
        src = Path(source)
        if not src.is_file():
            raise FileNotFoundError(f"Source image not found: {src}")
        if self.reencode:
            reencode_jpeg(src, dest, quality=self.jpeg_quality)
            return
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)

    def put_text(self, key: str, text: str) -> None:
        write_text_atomic(self._dest(key), text)
