"""
Image file input boundary.

Files larger than 4 MiB are rejected before they are read or encoded.
"""

import base64
import mimetypes
from pathlib import Path

from .errors import ValidationError
from .types import ImageInput

MAX_IMAGE_BYTES = 4 * 1024 * 1024

SUPPORTED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


class ImageTooLargeError(ValidationError):
    """Raised when an image exceeds MAX_IMAGE_BYTES."""

    pass


def load_image(path: str) -> ImageInput:
    """
    Load an image file and encode it for transport.

    Args:
        path: Path to the image file

    Returns:
        ImageInput with MIME type and base64 data

    Raises:
        FileNotFoundError: If the file doesn't exist
        ImageTooLargeError: If the file is larger than 4 MiB
        ValidationError: If the file is not a supported image type
    """
    image_path = Path(path)

    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not image_path.is_file():
        raise ValidationError(f"Path is not a file: {path}")

    file_size = image_path.stat().st_size
    if file_size > MAX_IMAGE_BYTES:
        raise ImageTooLargeError(f"Image file too large: {file_size / 1024 / 1024:.1f}MB (max: 4MB)")

    mime_type, _ = mimetypes.guess_type(image_path.name)
    if mime_type not in SUPPORTED_IMAGE_TYPES:
        raise ValidationError(f"Unsupported image format: {image_path.suffix or image_path.name}")

    data = base64.b64encode(image_path.read_bytes()).decode("ascii")
    return ImageInput(mime_type=mime_type, data=data)
