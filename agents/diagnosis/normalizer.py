# agents/diagnosis/normalizer.py
"""
Turns raw images or observation text into the payload sent to the classifier
"""
import base64
import binascii
import io
import logging
import re
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from agents.diagnosis.models import DiagnosticRequest, NormalizedPayload, PayloadKind
from core.exceptions import InputError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/jpeg"

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?,", re.IGNORECASE)


def _split_data_uri(value: str):
    """Return (mime, data) for a data URI, or (None, value) otherwise"""
    match = _DATA_URI.match(value)
    if not match:
        return None, value
    return match.group("mime"), value[match.end():]


def _sniff_mime(raw: bytes) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(raw)) as image:
            return Image.MIME.get(image.format)
    except (UnidentifiedImageError, OSError):
        return None


def _normalize_image(payload: Union[bytes, str], mime_type: Optional[str],
                     max_bytes: Optional[int]) -> NormalizedPayload:
    uri_mime = None
    if isinstance(payload, str):
        uri_mime, encoded = _split_data_uri(payload.strip())
        encoded = "".join(encoded.split())
        if not encoded:
            raise InputError("Image is empty")
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InputError(f"Image is not valid base64 data: {e}")
    else:
        raw = bytes(payload)

    if not raw:
        raise InputError("Image is empty")
    if max_bytes is not None and len(raw) > max_bytes:
        raise InputError(f"Image is too large ({len(raw)} bytes, limit {max_bytes})")

    mime = mime_type or uri_mime or _sniff_mime(raw) or DEFAULT_IMAGE_MIME
    mime = mime.lower()
    if not mime.startswith("image/"):
        raise InputError(f"Unsupported image type: {mime}")

    return NormalizedPayload(
        kind=PayloadKind.IMAGE,
        data=base64.b64encode(raw).decode("ascii"),
        mime_type=mime,
    )


def normalize(payload: Union[bytes, str], payload_kind: Optional[PayloadKind] = None,
              mime_type: Optional[str] = None, max_bytes: Optional[int] = None) -> NormalizedPayload:
    """
    Convert an image or a text blob into a canonical payload.

    Without an explicit ``payload_kind``, bytes and well-formed ``data:`` URIs
    are treated as images and any other string as text. Images come back base64 encoded
    with an explicit mime type; text comes back trimmed.
    """
    if payload is None:
        raise InputError("Nothing to analyze")

    if payload_kind is None:
        is_image = isinstance(payload, (bytes, bytearray)) or _DATA_URI.match(payload.strip()) is not None
        payload_kind = PayloadKind.IMAGE if is_image else PayloadKind.TEXT

    if payload_kind == PayloadKind.IMAGE:
        return _normalize_image(payload, mime_type, max_bytes)

    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError:
            raise InputError("Text observation is not valid UTF-8")

    text = payload.strip()
    if not text:
        raise InputError("Observation text is empty")
    return NormalizedPayload(kind=PayloadKind.TEXT, data=text)


def normalize_request(request: DiagnosticRequest, max_bytes: Optional[int] = None) -> NormalizedPayload:
    """Normalize the payload carried by a diagnostic request"""
    normalized = normalize(request.payload, request.payload_kind, request.mime_type, max_bytes)
    logger.debug(f"Normalized {normalized.kind.value} payload ({len(normalized.data)} chars)")
    return normalized
