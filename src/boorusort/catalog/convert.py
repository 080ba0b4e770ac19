"""Image re-encoding applied before visual similarity searches."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from .errors import ConversionError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset({"PNG", "JPEG", "GIF"})
JPEG_QUALITY = 90


class ImageConverter:
    """Prepare image bytes for upload, re-encoding large files as JPEG.

    ``convert`` follows the ``processing.convert`` setting: ``False`` never
    re-encodes, ``True`` always does, an integer re-encodes files whose size
    is at least that many bytes. The result for the current file is cached
    until :meth:`reset` is called.
    """

    def __init__(self, convert: Union[bool, int] = True) -> None:
        self.convert = convert
        self._cached: Optional[tuple[Path, bytes]] = None

    def should_convert(self, path: Path) -> bool:
        """Return True when ``path`` must be re-encoded before upload."""
        if isinstance(self.convert, bool):
            return self.convert
        return path.stat().st_size >= self.convert

    def prepare(self, path: Path) -> bytes:
        """Return the bytes to submit for ``path``.

        Raises:
            ConversionError: If the image cannot be decoded or re-encoded.
        """
        if self._cached is not None and self._cached[0] == path:
            return self._cached[1]

        if self.should_convert(path):
            data = self._reencode(path)
        else:
            data = path.read_bytes()

        self._cached = (path, data)
        return data

    def reset(self) -> None:
        """Forget the bytes prepared for the previous file."""
        self._cached = None

    def _reencode(self, path: Path) -> bytes:
        try:
            with Image.open(path) as img:
                if img.format not in SUPPORTED_FORMATS:
                    raise ConversionError(
                        f"Unsupported image format {img.format or 'unknown'} for {path.name}"
                    )
                img.load()
                if img.mode in ("RGBA", "LA", "P"):
                    rgba = img.convert("RGBA")
                    flattened = Image.new("RGB", rgba.size, (255, 255, 255))
                    flattened.paste(rgba, mask=rgba.split()[-1])
                else:
                    flattened = img.convert("RGB")
                buffer = io.BytesIO()
                flattened.save(buffer, "JPEG", quality=JPEG_QUALITY)
        except ConversionError:
            raise
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ConversionError(f"File conversion failed for {path.name}: {exc}") from exc

        data = buffer.getvalue()
        LOGGER.debug("Re-encoded %s to %d bytes of JPEG", path.name, len(data))
        return data


__all__ = ["ImageConverter", "SUPPORTED_FORMATS", "JPEG_QUALITY"]
