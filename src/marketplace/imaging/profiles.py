"""Image profiles — the limits each upload site applies.

Payment proofs and catalog photos go through the same processor with different
ceilings: a proof must stay legible for the admin who verifies the transfer, a
catalog photo only needs to fill a product card.
"""

from dataclasses import dataclass

from marketplace import config


@dataclass(frozen=True)
class ImageProfile:
    name: str
    field: str  # Field name reported in validation errors
    max_upload_bytes: int
    max_dimension: int
    max_output_bytes: int
    quality: int
    min_quality: int = 30
    format: str = "JPEG"
    content_type: str = "image/jpeg"
    accepted_types: tuple[str, ...] = ()


PAYMENT_PROOF = ImageProfile(
    name="payment_proof",
    field="payment_proof",
    max_upload_bytes=config.PAYMENT_PROOF_MAX_UPLOAD_BYTES,
    max_dimension=config.PAYMENT_PROOF_MAX_DIMENSION,
    max_output_bytes=config.PAYMENT_PROOF_MAX_OUTPUT_BYTES,
    quality=config.PAYMENT_PROOF_QUALITY,
)

CATALOG_PHOTO = ImageProfile(
    name="catalog_photo",
    field="image",
    max_upload_bytes=config.CATALOG_PHOTO_MAX_UPLOAD_BYTES,
    max_dimension=config.CATALOG_PHOTO_MAX_DIMENSION,
    max_output_bytes=config.CATALOG_PHOTO_MAX_OUTPUT_BYTES,
    quality=config.CATALOG_PHOTO_QUALITY,
    accepted_types=config.CATALOG_PHOTO_TYPES,
)
