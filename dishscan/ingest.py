"""Photo ingestion: keep a fetchable copy of the photo and encode it for analysis."""

from __future__ import annotations

import base64
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .errors import IngestionError
from .models import BOX_SCALE, BoundingBox, ImageRef

logger = logging.getLogger(__name__)


@dataclass
class EncodedImage:
    data: bytes
    mime_type: str

    @property
    def base64(self) -> str:
        return base64.standard_b64encode(self.data).decode()


class PhotoIngestor:
    """Copy user photos into a session directory and re-read them on demand."""

    def __init__(self, session_dir: str = "/tmp/dishscan") -> None:
        self._session_dir = Path(session_dir)
        self._session_dir.mkdir(parents=True, exist_ok=True)

    def ingest(self, image_path: str | Path) -> ImageRef:
        """Validate a user-selected photo and return a session-scoped reference."""
        source = Path(image_path)
        try:
            data = source.read_bytes()
        except OSError as e:
            raise IngestionError(f"Cannot read image {source}: {e}") from e

        _decode(data, source)

        now = datetime.now(timezone.utc)
        suffix = source.suffix.lower() or ".jpg"
        stamp = now.strftime("%Y%m%d_%H%M%S")
        target = self._session_dir / f"scan_{stamp}_{uuid.uuid4().hex[:12]}{suffix}"
        try:
            target.write_bytes(data)
        except OSError as e:
            raise IngestionError(f"Cannot store image {source} in {target.parent}: {e}") from e

        mime_type = mimetypes.guess_type(source.name)[0] or "image/jpeg"
        logger.debug("Ingested %s as %s (%s)", source, target, mime_type)
        return ImageRef(
            path=str(target),
            mime_type=mime_type,
            ingested_at=now.isoformat(),
        )

    def encode(self, ref: ImageRef) -> EncodedImage:
        """Re-derive the transmission payload from a reference."""
        try:
            data = Path(ref.path).read_bytes()
        except OSError as e:
            raise IngestionError(
                f"Image reference {ref.path} is no longer available: {e}"
            ) from e
        if not data:
            raise IngestionError(f"Image reference {ref.path} is empty")
        return EncodedImage(data=data, mime_type=ref.mime_type)

    def release(self, ref: ImageRef) -> None:
        """Drop the session copy once the scan no longer needs it."""
        Path(ref.path).unlink(missing_ok=True)

    def crop(self, ref: ImageRef, box: BoundingBox, dest: str | Path) -> Path:
        """Write the region of ``ref`` framed by ``box`` to ``dest`` as JPEG."""
        try:
            import cv2
        except ImportError:
            raise ImportError(
                "opencv-python is required: pip install opencv-python"
            ) from None

        img = cv2.imread(ref.path)
        if img is None:
            raise IngestionError(f"Cannot decode image {ref.path}")

        h, w = img.shape[:2]
        top = _scale(box.y_min, h)
        left = _scale(box.x_min, w)
        bottom = _scale(box.y_max, h)
        right = _scale(box.x_max, w)
        if bottom <= top or right <= left:
            raise ValueError(f"Empty crop region: {box.to_list()}")

        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(dest), img[top:bottom, left:right])
        return dest


def _scale(value: float, size: int) -> int:
    return max(0, min(size, round(value / BOX_SCALE * size)))


def _decode(data: bytes, source: Path) -> None:
    """Make sure the bytes are a decodable image."""
    try:
        import cv2
        import numpy as np
    except ImportError:
        raise ImportError(
            "opencv-python and numpy are required: pip install opencv-python"
        ) from None

    if not data:
        raise IngestionError(f"Image {source} is empty")
    img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise IngestionError(f"Image {source} could not be decoded")
