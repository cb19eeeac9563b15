"""
Image processing for generated avatars.

Decodes base64 pixel data, redraws it onto a fixed square canvas and
re-encodes it as compressed WebP to bound storage size.
"""
import base64
import io
from typing import Tuple

from PIL import Image

AVATAR_SIZE = (512, 512)
AVATAR_FORMAT = "WEBP"
AVATAR_CONTENT_TYPE = "image/webp"


def decode_base64_image(b64_data: str) -> Image.Image:
    """
    Decode base64 (optionally a full ``data:`` URI) into a loaded PIL image.

    Raises:
        binascii.Error: If the payload is not valid base64
        PIL.UnidentifiedImageError: If the bytes are not a known image format
    """
    if b64_data.startswith("data:"):
        b64_data = b64_data.split(",", 1)[-1]
    raw = base64.b64decode(b64_data, validate=True)
    image = Image.open(io.BytesIO(raw))
    image.load()
    return image


def resize_to_canvas(image: Image.Image, size: Tuple[int, int] = AVATAR_SIZE) -> Image.Image:
    """
    Redraw *image* at exactly *size*.

    The destination size is authoritative: the image is stretched to fill
    the canvas, no letterboxing and no aspect-ratio preservation.
    """
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")
    return image.resize(size, Image.Resampling.LANCZOS)


def encode_image(image: Image.Image, quality: int = 70, image_format: str = AVATAR_FORMAT) -> bytes:
    """Encode *image* with lossy compression at *quality* (0-100)."""
    buffer = io.BytesIO()
    image.save(buffer, format=image_format, quality=quality)
    return buffer.getvalue()


def process_avatar_image(
    b64_data: str,
    size: Tuple[int, int] = AVATAR_SIZE,
    quality: int = 70,
) -> bytes:
    """Decode -> resize -> encode. Blocking; run it off the event loop."""
    image = decode_base64_image(b64_data)
    return encode_image(resize_to_canvas(image, size), quality=quality)


def to_data_uri(b64_data: str, mime_type: str = "image/png") -> str:
    """Wrap base64 pixel data as a directly renderable inline image reference."""
    return f"data:{mime_type};base64,{b64_data}"
