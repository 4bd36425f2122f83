"""Image re-encoding before upload."""

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from props_assets.domain.errors import ValidationError

DEFAULT_JPEG_QUALITY = 70


def encode_jpeg(image_bytes: bytes, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Decode any supported image and re-encode it as a JPEG."""
    if not image_bytes:
        raise ValidationError("Failed to process image")
    try:
        with Image.open(BytesIO(image_bytes)) as image:
            converted = image.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ValidationError("Failed to process image") from exc
    buffer = BytesIO()
    converted.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()
