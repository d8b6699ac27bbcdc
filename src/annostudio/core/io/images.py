from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np


def image_size(path: str | Path) -> Optional[Tuple[int, int]]:
    """Return (width, height) of an image file, or None if it can't be decoded."""
    p = Path(path)
    if not p.is_file():
        return None
    data = np.fromfile(str(p), dtype=np.uint8)
    img = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
    if img is None:
        return None
    h, w = img.shape[:2]
    return int(w), int(h)


def reencode_jpeg(src: str | Path, dst: str | Path, quality: int = 95) -> Path:
    """Decode any OpenCV-readable image and write it back as JPEG."""
    data = np.fromfile(str(src), dtype=np.uint8)
    img = cv2.imdecode(data, cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError(f"Cannot decode image: {src}")
    ok, buf = cv2.imencode(".jpg", img, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise ValueError(f"Cannot encode image as JPEG: {src}")
    out = Path(dst)
    out.parent.mkdir(parents=True, exist_ok=True)
    buf.tofile(str(out))
    return out
