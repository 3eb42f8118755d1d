"""Text encoding for images stored inline on documents (``data:`` URLs)."""

import base64
import binascii

from protean.exceptions import ValidationError

_DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


def to_data_url(data: bytes, content_type: str) -> str:
    return f"{_DATA_URL_PREFIX}{content_type}{_BASE64_MARKER}{base64.b64encode(data).decode('ascii')}"


def from_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a ``data:`` URL into its content type and decoded bytes."""
    if not data_url or not data_url.startswith(_DATA_URL_PREFIX) or _BASE64_MARKER not in data_url:
        raise ValidationError({"image": ["Not a base64 data URL"]})

    header, _, payload = data_url.partition(_BASE64_MARKER)
    content_type = header[len(_DATA_URL_PREFIX) :]
    try:
        return content_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError({"image": ["Malformed base64 payload"]}) from exc


def encoded_size(data_url: str) -> int:
    """Approximate decoded size in bytes of the payload carried by a data URL."""
    if not data_url:
        return 0
    _, _, payload = data_url.partition(_BASE64_MARKER)
    padding = payload.count("=", max(len(payload) - 2, 0))
    return max(len(payload) * 3 // 4 - padding, 0)


def format_bytes(size: int) -> str:
    """Human-readable size, e.g. ``1.5 MB``."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = round(size / 1024**exponent, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[exponent]}"


def reduction_percent(original_size: int, final_size: int) -> int:
    if original_size <= 0:
        return 0
    return round((1 - final_size / original_size) * 100)
