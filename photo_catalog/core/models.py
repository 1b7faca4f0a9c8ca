from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class RawMetadata(BaseModel):
    """Per-field extraction from one image file; every field is independent."""

    model_config = ConfigDict(frozen=True)

    capture_datetime: Optional[datetime] = None
    modified_datetime: Optional[datetime] = None
    digitized_datetime: Optional[datetime] = None
    gps_date: Optional[date] = None
    gps_time: Optional[tuple[int, int, int]] = None
    make: Optional[str] = None
    model: Optional[str] = None
    pixel_width: Optional[int] = None
    pixel_height: Optional[int] = None
    orientation_code: Optional[int] = None
    gps_lat_magnitude: Optional[float] = None
    gps_long_magnitude: Optional[float] = None
    gps_lat_ref: Optional[str] = None
    gps_long_ref: Optional[str] = None


class ResolvedMetadata(BaseModel):
    date: Optional[datetime] = None
    rotation_degrees: Literal[0, 90, 180, 270] = 0
    width: Optional[int] = None
    height: Optional[int] = None
    camera: Optional[tuple[str, str]] = None
    position: Optional[tuple[float, float]] = None


class Camera(BaseModel):
    id: int
    manufacturer: str
    model: str


class CatalogEntry(BaseModel):
    id: int
    path: str
    date: Optional[datetime] = None
    rotation: int = 0
    width: int
    height: int
    camera_id: Optional[int] = None
    grade: Optional[int] = None
    is_public: bool = False


class StoredPosition(BaseModel):
    """Position in fixed-point micro-degrees."""

    photo_id: int
    latitude: int
    longitude: int


class Modification(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class PositionOutcome(str, Enum):
    INSERTED = "inserted"
    MATCHED = "matched"
    CONFLICT = "conflict"


class ReconcileResult(BaseModel):
    modification: Modification
    entry: CatalogEntry
    position: Optional[PositionOutcome] = None


class ScannedFile(BaseModel):
    """One crawl candidate; `error` is set when the entry could not be read."""

    path: str
    error: Optional[str] = None


class CrawlSummary(BaseModel):
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    position_conflicts: int = 0
    stopped_early: bool = False

    @property
    def total(self) -> int:
        return self.created + self.updated + self.unchanged + self.skipped + self.failed

    def count(self, modification: Modification) -> None:
        if modification is Modification.CREATED:
            self.created += 1
        elif modification is Modification.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1
