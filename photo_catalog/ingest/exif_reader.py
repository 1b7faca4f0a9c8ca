from __future__ import annotations

import logging
import numbers
from datetime import date, datetime
from pathlib import Path
from typing import IO, Any, Callable, Mapping, Optional, TypeVar, Union

from PIL import Image, UnidentifiedImageError

from photo_catalog.core.errors import FieldError, ImageTooLarge
from photo_catalog.core.models import RawMetadata

logger = logging.getLogger(__name__)

# IFD0
IMAGE_WIDTH_TAG = 256
IMAGE_LENGTH_TAG = 257
MAKE_TAG = 271
MODEL_TAG = 272
ORIENTATION_TAG = 274
DATETIME_TAG = 306  # modification time
EXIF_IFD_TAG = 34665
GPS_INFO_TAG = 34853

# Exif sub-IFD
DATETIME_ORIGINAL_TAG = 36867
DATETIME_DIGITIZED_TAG = 36868
PIXEL_X_DIMENSION_TAG = 40962
PIXEL_Y_DIMENSION_TAG = 40963

# GPS sub-IFD
GPS_LATITUDE_REF_TAG = 1
GPS_LATITUDE_TAG = 2
GPS_LONGITUDE_REF_TAG = 3
GPS_LONGITUDE_TAG = 4
GPS_TIMESTAMP_TAG = 7
GPS_DATESTAMP_TAG = 29

DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"
DATE_FORMAT = "%Y:%m:%d"

Source = Union[str, Path, IO[bytes]]
T = TypeVar("T")


def single_text(value: Any) -> str:
    """Decode an ASCII tag that must hold exactly one non-empty segment.

    Pillow hands multi-segment ASCII values back as one string with the
    embedded NUL separators intact.
    """
    if not isinstance(value, str):
        raise FieldError(f"Got {value!r}, expected single ascii value")
    segments = [s.strip() for s in value.split("\x00")]
    non_empty = [s for s in segments if s]
    if len(non_empty) > 1:
        raise FieldError(f"Got {value!r}, expected single ascii value")
    return non_empty[0] if non_empty else ""


def parse_datetime(value: Any) -> datetime:
    text = single_text(value)
    try:
        return datetime.strptime(text, DATETIME_FORMAT)
    except ValueError as exc:
        raise FieldError(f"Bad datetime {text!r}: {exc}") from exc


def parse_date(value: Any) -> date:
    text = single_text(value)
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as exc:
        raise FieldError(f"Bad date {text!r}: {exc}") from exc


def parse_uint(value: Any) -> int:
    """Accept a single SHORT or LONG value."""
    if isinstance(value, tuple) and len(value) == 1:
        value = value[0]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise FieldError(f"Unsupported value {value!r}, expected one unsigned integer")
    return value


def _rational_parts(value: Any) -> tuple[int, int]:
    if not isinstance(value, numbers.Rational):
        raise FieldError(f"Expected rational, got {value!r}")
    numerator, denominator = int(value.numerator), int(value.denominator)
    if denominator == 0:
        raise FieldError(f"Rational {value!r} has a zero denominator")
    return numerator, denominator


def _three_rationals(value: Any) -> list[tuple[int, int]]:
    if not isinstance(value, tuple) or len(value) != 3:
        raise FieldError(f"Expected three rationals, got {value!r}")
    return [_rational_parts(v) for v in value]


def parse_lat_long(value: Any) -> float:
    """Degrees, minutes and seconds as three rationals to unsigned decimal degrees."""
    degrees, minutes, seconds = (n / d for n, d in _three_rationals(value))
    return degrees + minutes / 60.0 + seconds / 3600.0


def parse_gps_time(value: Any) -> tuple[int, int, int]:
    # Only the integer quotient of each rational is kept; fractional seconds are dropped.
    hour, minute, second = (n // d for n, d in _three_rationals(value))
    if not (0 <= hour < 24 and 0 <= minute < 60 and 0 <= second < 60):
        raise FieldError(f"Time out of range: {hour}:{minute}:{second}")
    return hour, minute, second


def _field(
    tags: Mapping[int, Any],
    tag: int,
    parser: Callable[[Any], T],
    label: str,
) -> Optional[T]:
    value = tags.get(tag)
    if value is None:
        return None
    try:
        return parser(value)
    except FieldError as exc:
        logger.warning("Bad value for tag %d in %s: %s", tag, label, exc)
        return None


def _text_field(tags: Mapping[int, Any], tag: int, label: str) -> Optional[str]:
    return _field(tags, tag, single_text, label) or None


def extract_fields(
    primary: Mapping[int, Any], gps: Mapping[int, Any], label: str = "<image>"
) -> dict[str, Any]:
    """Pull the catalog fields out of the primary and GPS tag dictionaries.

    `primary` holds IFD0 merged with the Exif sub-IFD. A malformed field is
    logged and left out; it never prevents the other fields from being read.
    """
    width = _field(primary, PIXEL_X_DIMENSION_TAG, parse_uint, label)
    if width is None:
        width = _field(primary, IMAGE_WIDTH_TAG, parse_uint, label)
    height = _field(primary, PIXEL_Y_DIMENSION_TAG, parse_uint, label)
    if height is None:
        height = _field(primary, IMAGE_LENGTH_TAG, parse_uint, label)

    return {
        "capture_datetime": _field(primary, DATETIME_ORIGINAL_TAG, parse_datetime, label),
        "modified_datetime": _field(primary, DATETIME_TAG, parse_datetime, label),
        "digitized_datetime": _field(primary, DATETIME_DIGITIZED_TAG, parse_datetime, label),
        "make": _text_field(primary, MAKE_TAG, label),
        "model": _text_field(primary, MODEL_TAG, label),
        "pixel_width": width,
        "pixel_height": height,
        "orientation_code": _field(primary, ORIENTATION_TAG, parse_uint, label),
        "gps_lat_magnitude": _field(gps, GPS_LATITUDE_TAG, parse_lat_long, label),
        "gps_long_magnitude": _field(gps, GPS_LONGITUDE_TAG, parse_lat_long, label),
        "gps_lat_ref": _text_field(gps, GPS_LATITUDE_REF_TAG, label),
        "gps_long_ref": _text_field(gps, GPS_LONGITUDE_REF_TAG, label),
        "gps_date": _field(gps, GPS_DATESTAMP_TAG, parse_date, label),
        "gps_time": _field(gps, GPS_TIMESTAMP_TAG, parse_gps_time, label),
    }


def _read_tags(img: Image.Image, label: str) -> tuple[dict[int, Any], dict[int, Any]]:
    try:
        exif = img.getexif()
        primary = dict(exif)
        primary.update(exif.get_ifd(EXIF_IFD_TAG))
        gps = dict(exif.get_ifd(GPS_INFO_TAG))
    except (SyntaxError, ValueError, TypeError, OSError, KeyError) as exc:
        # Pillow raises a mix of these for a damaged Exif block.
        logger.warning("Unreadable metadata in %s: %s", label, exc)
        return {}, {}
    return primary, gps


def read_metadata(source: Source) -> Optional[RawMetadata]:
    """Extract capture metadata from an image file or binary handle.

    Returns None when the data is not an image Pillow can identify. When the
    metadata lacks pixel dimensions, the size from the image header is used.
    """
    label = str(source) if isinstance(source, (str, Path)) else "<stream>"
    try:
        img = Image.open(source)
    except UnidentifiedImageError:
        logger.debug("Not an image: %s", label)
        return None
    except Image.DecompressionBombError as exc:
        raise ImageTooLarge(f"{label}: {exc}") from exc

    with img:
        primary, gps = _read_tags(img, label)
        fields = extract_fields(primary, gps, label)
        if fields["pixel_width"] is None or fields["pixel_height"] is None:
            logger.debug("Using decoded size %dx%d for %s", img.width, img.height, label)
            fields["pixel_width"], fields["pixel_height"] = img.size

    return RawMetadata(**fields)
