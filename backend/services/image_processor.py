"""Image checks for uploaded artwork photos."""

from io import BytesIO

from PIL import Image

# Pillow format name -> content type sent to storage
CONTENT_TYPES: dict[str, str] = {
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "heif": "image/heif",
}


def validate_image(data: bytes) -> bool:
    """Validate that the bytes are a readable image by opening them with Pillow."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
        return True
    except Exception:
        return False


def get_image_format(data: bytes) -> str | None:
    """Detect actual image format from file content."""
    try:
        with Image.open(BytesIO(data)) as img:
            return img.format.lower() if img.format else None
    except Exception:
        return None


def get_image_dimensions(data: bytes) -> tuple[int, int] | None:
    try:
        with Image.open(BytesIO(data)) as img:
            return img.size
    except Exception:
        return None


def content_type_for(data: bytes) -> str:
    return CONTENT_TYPES.get(get_image_format(data) or "", "application/octet-stream")
