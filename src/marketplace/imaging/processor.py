"""Image Evidence Processor — validate, compress and encode uploaded images.

``process_image`` is the entry point for both upload sites:

1. Validate: present, an ``image/*`` MIME type, allowed by the profile, within the
   profile's upload ceiling. Failures raise ``ValidationError`` before any decoding.
2. Compress: bound the longest edge, re-encode to JPEG and step the quality (then
   the dimensions) down until the output fits the profile's byte budget.
3. Encode: wrap the result in a ``data:`` URL for inline storage.

Compression failures never abort the caller. The original bytes are still a valid
image, so they are encoded as-is under their original content type.
"""

import io
from dataclasses import dataclass

import structlog
from PIL import Image, ImageOps
from protean.exceptions import ValidationError

from marketplace.imaging.encoding import format_bytes, reduction_percent, to_data_url
from marketplace.imaging.profiles import ImageProfile

logger = structlog.get_logger(__name__)

QUALITY_STEP = 10
SHRINK_FACTOR = 0.8
MIN_EDGE = 64


class ImageCompressionError(Exception):
    """The image could not be decoded or re-encoded."""


class EvidenceReadError(Exception):
    """The uploaded file could not be read. Retryable."""


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def read(cls, filename, content_type, stream, max_bytes=None):
        """Read an upload from a file-like object, surfacing I/O failures as retryable.

        With ``max_bytes`` at most one byte past the ceiling is read, enough for
        ``validate_image`` to refuse the file without buffering all of it.
        """
        try:
            data = stream.read() if max_bytes is None else stream.read(max_bytes + 1)
        except OSError as exc:
            raise EvidenceReadError(f"Could not read uploaded file {filename!r}") from exc
        return cls(filename=filename or "", content_type=content_type or "", data=data or b"")


@dataclass(frozen=True)
class ProcessedImage:
    encoded: str
    content_type: str
    original_size: int
    final_size: int
    compressed: bool

    @property
    def reduction_percent(self) -> int:
        return reduction_percent(self.original_size, self.final_size)


def validate_image(upload: ImageUpload | None, profile: ImageProfile) -> None:
    if upload is None or not upload.data:
        raise ValidationError({profile.field: ["An image file is required"]})

    content_type = (upload.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise ValidationError({profile.field: ["File must be an image"]})

    if profile.accepted_types and content_type not in profile.accepted_types:
        raise ValidationError({profile.field: [f"Unsupported image type: {content_type}"]})

    if upload.size > profile.max_upload_bytes:
        raise ValidationError(
            {profile.field: [f"Image must not exceed {format_bytes(profile.max_upload_bytes)}"]}
        )


def compress_image(data: bytes, profile: ImageProfile) -> bytes:
    """Return ``data`` re-encoded to the profile's format, dimension and size bounds."""
    try:
        with Image.open(io.BytesIO(data)) as source:
            image = _flatten(ImageOps.exif_transpose(source))
        image.thumbnail((profile.max_dimension, profile.max_dimension), Image.Resampling.LANCZOS)
        return _encode_within_budget(image, profile)
    except (OSError, EOFError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageCompressionError(str(exc)) from exc


def _flatten(image):
    """Composite transparency onto white; JPEG has no alpha channel."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _encode_within_budget(image, profile: ImageProfile) -> bytes:
    quality = profile.quality
    while True:
        buffer = io.BytesIO()
        image.save(buffer, format=profile.format, quality=quality, optimize=True)
        payload = buffer.getvalue()

        if len(payload) <= profile.max_output_bytes:
            return payload

        if quality > profile.min_quality:
            quality = max(profile.min_quality, quality - QUALITY_STEP)
            continue

        width, height = image.size
        if max(width, height) <= MIN_EDGE:
            # Smallest we are willing to go
            return payload
        image = image.resize(
            (max(1, int(width * SHRINK_FACTOR)), max(1, int(height * SHRINK_FACTOR))),
            Image.Resampling.LANCZOS,
        )


def process_image(upload: ImageUpload | None, profile: ImageProfile) -> ProcessedImage:
    validate_image(upload, profile)

    try:
        payload = compress_image(upload.data, profile)
        content_type = profile.content_type
        compressed = True
    except ImageCompressionError as exc:
        logger.warning(
            "Image compression failed, keeping original file",
            profile=profile.name,
            filename=upload.filename,
            error=str(exc),
        )
        payload = upload.data
        content_type = upload.content_type
        compressed = False

    result = ProcessedImage(
        encoded=to_data_url(payload, content_type),
        content_type=content_type,
        original_size=upload.size,
        final_size=len(payload),
        compressed=compressed,
    )
    logger.info(
        "Image processed",
        profile=profile.name,
        original_size=format_bytes(result.original_size),
        final_size=format_bytes(result.final_size),
        reduction_percent=result.reduction_percent,
        compressed=compressed,
    )
    return result
