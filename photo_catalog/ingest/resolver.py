"""Pure functions turning a RawMetadata extraction into ResolvedMetadata."""

from __future__ import annotations

import logging
from datetime import datetime, time, timezone, tzinfo
from typing import Optional

from photo_catalog.core.errors import UnknownOrientation
from photo_catalog.core.models import RawMetadata, ResolvedMetadata

logger = logging.getLogger(__name__)

ORIENTATION_DEGREES = {0: 0, 1: 0, 3: 180, 6: 90, 8: 270}


def rotation_degrees(orientation_code: Optional[int]) -> int:
    """Map a raw orientation code to clockwise rotation in degrees.

    A missing tag means 0; a present but unknown code raises UnknownOrientation.
    """
    if orientation_code is None:
        logger.debug("Orientation tag missing, default to 0 degrees")
        return 0
    try:
        return ORIENTATION_DEGREES[orientation_code]
    except KeyError:
        raise UnknownOrientation(orientation_code) from None


def resolve_date(raw: RawMetadata, local_tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Pick the best capture time as a naive local datetime.

    Direct timestamps win over GPS ones, since some devices keep stamping the
    last known fix long after it went stale. GPS date and time are UTC.
    """
    for value in (raw.capture_datetime, raw.modified_datetime, raw.digitized_datetime):
        if value is not None:
            return value
    if raw.gps_date is not None and raw.gps_time is not None:
        utc = datetime.combine(raw.gps_date, time(*raw.gps_time), tzinfo=timezone.utc)
        local = utc.astimezone(local_tz).replace(tzinfo=None)
        logger.debug("GPS date %s %s => %s", raw.gps_date, raw.gps_time, local)
        return local
    logger.debug("No date found in metadata")
    return None


def signed_coordinate(
    magnitude: Optional[float], ref: Optional[str], positive: str, negative: str
) -> Optional[float]:
    if magnitude is None:
        return None
    if ref == positive:
        return abs(magnitude)
    if ref == negative:
        return -abs(magnitude)
    if ref is not None:
        logger.error("Bad hemisphere reference %r, expected %s or %s", ref, positive, negative)
    return magnitude


def resolve_position(raw: RawMetadata) -> Optional[tuple[float, float]]:
    lat = signed_coordinate(raw.gps_lat_magnitude, raw.gps_lat_ref, "N", "S")
    long = signed_coordinate(raw.gps_long_magnitude, raw.gps_long_ref, "E", "W")
    if lat is None or long is None:
        return None
    return lat, long


def resolve_camera(raw: RawMetadata) -> Optional[tuple[str, str]]:
    if raw.make and raw.model:
        return raw.make, raw.model
    return None


def resolve_metadata(raw: RawMetadata, local_tz: Optional[tzinfo] = None) -> ResolvedMetadata:
    return ResolvedMetadata(
        date=resolve_date(raw, local_tz),
        rotation_degrees=rotation_degrees(raw.orientation_code),
        width=raw.pixel_width,
        height=raw.pixel_height,
        camera=resolve_camera(raw),
        position=resolve_position(raw),
    )
