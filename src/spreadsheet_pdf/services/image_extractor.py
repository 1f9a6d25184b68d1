"""Embedded picture extraction.

Pictures are identified by their leading magic bytes rather than by the
name the workbook gives them. Anything unrecognized is skipped with a
warning and never fails the conversion.
"""

from __future__ import annotations

from dataclasses import dataclass

from spreadsheet_pdf.models import ImageFormat
from spreadsheet_pdf.utils.logging import get_logger
from spreadsheet_pdf.workbook import Sheet

logger = get_logger(__name__)

# Signature prefixes checked in order.
MAGIC_SIGNATURES: tuple[tuple[bytes, ImageFormat], ...] = (
    (b"\x89PNG", ImageFormat.PNG),
    (b"\xff\xd8", ImageFormat.JPEG),
    (b"GIF8", ImageFormat.GIF),
    (b"BM", ImageFormat.BMP),
)

MIN_SIGNATURE_LENGTH = 4


@dataclass(frozen=True)
class ExtractedImage:
    """A picture ready to be embedded."""

    data: bytes
    image_format: ImageFormat
    name: str = ""


def detect_image_format(data: bytes | None) -> ImageFormat | None:
    """Identify a raster format from its first bytes.

    Args:
        data: Raw picture bytes.

    Returns:
        The detected format, or None for short or unrecognized data.
    """
    if data is None or len(data) < MIN_SIGNATURE_LENGTH:
        return None
    for signature, image_format in MAGIC_SIGNATURES:
        if data.startswith(signature):
            return image_format
    return None


def extract_images(sheet: Sheet) -> list[ExtractedImage]:
    """Return the recognizable pictures of a sheet in anchor order."""
    images: list[ExtractedImage] = []
    for picture in sheet.pictures:
        image_format = detect_image_format(picture.data)
        if picture.data is None or image_format is None:
            logger.warning(
                "Skipping unrecognized image",
                sheet=sheet.name,
                picture=picture.name or "<unnamed>",
            )
            continue
        images.append(
            ExtractedImage(
                data=picture.data, image_format=image_format, name=picture.name
            )
        )
    return images
