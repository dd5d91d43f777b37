"""Image surface for the rotation engine.

Decodes caller input (raw bytes, bare base64 or a ``data:`` URL) into an
RGBA pixel grid and re-encodes corrected pixels in the same representation
and format family. A surface is acquired per call as a context manager so
no decoder state is shared between concurrent callers.
"""

import base64
import binascii
import io
import re
from dataclasses import dataclass
from types import TracebackType

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from docskew.utils.logger import get_logger

logger = get_logger(__name__)

ImageSource = bytes | str

DEFAULT_QUALITY = 95

_DATA_URL = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.+-]+)*;base64,(?P<data>.*)$",
    re.DOTALL,
)

_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "TIFF": "image/tiff",
    "BMP": "image/bmp",
}

# Formats Pillow reports for inputs that should be written back as another family.
_FORMAT_FAMILIES = {"MPO": "JPEG", "JPEG2000": "PNG", "GIF": "PNG"}

_OPAQUE_FORMATS = {"JPEG", "BMP"}


class ImageDecodeError(ValueError):
    """Raised when input cannot be parsed as a raster image."""


@dataclass(frozen=True)
class RawImage:
    """Decoded source pixels.

    Attributes:
        pixels: ``(height, width, 4)`` uint8 RGBA array, flagged read-only;
            every processing step works on its own copy.
        format: Format family of the source, e.g. ``"JPEG"`` or ``"PNG"``.
    """

    pixels: np.ndarray
    format: str

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


def _unwrap(source: ImageSource) -> tuple[bytes, str]:
    """Return the encoded image bytes and how the caller wrapped them."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source), "bytes"
    if not isinstance(source, str):
        raise ImageDecodeError(f"Unsupported image input type: {type(source).__name__}")

    text = source.strip()
    match = _DATA_URL.match(text)
    payload, wrapping = (match.group("data"), "data-url") if match else (text, "base64")
    try:
        return base64.b64decode("".join(payload.split()), validate=True), wrapping
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError("Image string is not valid base64") from exc


def encode_image(pixels: np.ndarray, fmt: str, quality: int = DEFAULT_QUALITY) -> bytes:
    """Encode an RGBA pixel grid.

    Args:
        pixels: ``(height, width, 4)`` uint8 RGBA array.
        fmt: Target format family. Unknown families are written as PNG.
        quality: Lossy compression quality for JPEG and WEBP.

    Returns:
        Encoded image bytes.
    """
    fmt = _FORMAT_FAMILIES.get(fmt.upper(), fmt.upper())
    if fmt not in _MIME_TYPES:
        fmt = "PNG"

    image = Image.fromarray(np.ascontiguousarray(pixels))
    if fmt in _OPAQUE_FORMATS:
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.getchannel("A"))
        image = background

    save_kwargs: dict[str, object] = {}
    if fmt in ("JPEG", "WEBP"):
        save_kwargs["quality"] = quality

    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **save_kwargs)
    logger.debug("Encoded %dx%d image as %s", image.width, image.height, fmt)
    return buffer.getvalue()


class ImageSurface:
    """Caller-scoped decode/encode surface for a single image.

    Example:
        >>> with ImageSurface(data) as surface:
        ...     raw = surface.raw
        ...     output = surface.encode(raw.pixels)

    Args:
        source: Encoded image as bytes, bare base64 or a ``data:`` URL.
        quality: Lossy quality used by :meth:`encode`.
    """

    def __init__(self, source: ImageSource, quality: int = DEFAULT_QUALITY) -> None:
        self._source = source
        self._quality = quality
        self._image: Image.Image | None = None
        self._raw: RawImage | None = None
        self._wrapping = "bytes"

    def __enter__(self) -> "ImageSurface":
        data, self._wrapping = _unwrap(self._source)
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ImageDecodeError(f"Cannot decode image: {exc}") from exc

        fmt = (image.format or "PNG").upper()
        try:
            # Phone cameras store the sensor orientation in EXIF instead of the pixels.
            upright = ImageOps.exif_transpose(image)
            if upright is not image:
                image.close()
            self._image = upright

            rgba = self._image.convert("RGBA")
            pixels = np.array(rgba)
            rgba.close()
        except Exception as exc:
            image.close()
            if self._image is not None and self._image is not image:
                self._image.close()
            self._image = None
            if isinstance(exc, (OSError, ValueError, SyntaxError)):
                raise ImageDecodeError(f"Cannot decode image: {exc}") from exc
            raise

        pixels.flags.writeable = False
        self._raw = RawImage(pixels=pixels, format=_FORMAT_FAMILIES.get(fmt, fmt))
        logger.debug(
            "Decoded %s image %dx%d", self._raw.format, self._raw.width, self._raw.height
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._image is not None:
            self._image.close()
        self._image = None
        self._raw = None

    @property
    def raw(self) -> RawImage:
        """Decoded pixels; only available inside the ``with`` block."""
        if self._raw is None:
            raise RuntimeError("ImageSurface used outside of its context")
        return self._raw

    def encode(self, pixels: np.ndarray) -> ImageSource:
        """Encode pixels in the source's format family and representation."""
        fmt = self.raw.format
        data = encode_image(pixels, fmt, self._quality)
        if self._wrapping == "bytes":
            return data

        family = _FORMAT_FAMILIES.get(fmt, fmt)
        mime = _MIME_TYPES.get(family, "image/png")
        text = base64.b64encode(data).decode("ascii")
        if self._wrapping == "data-url":
            return f"data:{mime};base64,{text}"
        return text
