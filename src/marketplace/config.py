"""Marketplace settings.

Protean infrastructure (databases, event store, processing mode) is configured in
``domain.toml``. The knobs below are marketplace policy and are read from the
environment so deployments can tune them without code changes.
"""

import os

MIB = 1024 * 1024
KIB = 1024


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


# Order numbers: <prefix>-<epoch millis>-<random suffix>
ORDER_NUMBER_PREFIX = os.getenv("MARKETPLACE_ORDER_PREFIX", "MPO")
ORDER_NUMBER_SUFFIX_MAX = _int_env("MARKETPLACE_ORDER_SUFFIX_MAX", 999)

# Payment proof (bukti pembayaran)
PAYMENT_PROOF_MAX_UPLOAD_BYTES = _int_env("MARKETPLACE_PROOF_MAX_UPLOAD_BYTES", 10 * MIB)
PAYMENT_PROOF_MAX_DIMENSION = _int_env("MARKETPLACE_PROOF_MAX_DIMENSION", 1920)
PAYMENT_PROOF_MAX_OUTPUT_BYTES = _int_env("MARKETPLACE_PROOF_MAX_OUTPUT_BYTES", 1 * MIB)
PAYMENT_PROOF_QUALITY = _int_env("MARKETPLACE_PROOF_QUALITY", 85)

# Catalog photos
CATALOG_PHOTO_MAX_UPLOAD_BYTES = _int_env("MARKETPLACE_PHOTO_MAX_UPLOAD_BYTES", 5 * MIB)
CATALOG_PHOTO_MAX_DIMENSION = _int_env("MARKETPLACE_PHOTO_MAX_DIMENSION", 400)
CATALOG_PHOTO_MAX_OUTPUT_BYTES = _int_env("MARKETPLACE_PHOTO_MAX_OUTPUT_BYTES", 700 * KIB)
CATALOG_PHOTO_QUALITY = _int_env("MARKETPLACE_PHOTO_QUALITY", 80)
CATALOG_PHOTO_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")

# Views the checkout flow redirects back to
MARKETPLACE_VIEW = os.getenv("MARKETPLACE_VIEW", "/marketplace")
CART_VIEW = os.getenv("MARKETPLACE_CART_VIEW", "/marketplace/cart")

# Open checkouts not submitted within this window are dropped
CHECKOUT_TTL_SECONDS = _int_env("MARKETPLACE_CHECKOUT_TTL_SECONDS", 30 * 60)
