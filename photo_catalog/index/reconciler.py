from __future__ import annotations

import logging
from typing import Optional

from photo_catalog.core.errors import MissingHeight, MissingWidth
from photo_catalog.core.models import (
    CatalogEntry,
    Modification,
    PositionOutcome,
    ReconcileResult,
    ResolvedMetadata,
)

from .cameras import CameraRegistry
from .store import CatalogStore

logger = logging.getLogger(__name__)

MICRO_DEGREES = 1_000_000
# Roughly metre-scale; smaller differences are GPS noise.
POSITION_TOLERANCE = 1000


def to_micro_degrees(degrees: float) -> int:
    return round(degrees * MICRO_DEGREES)


class Reconciler:
    """Bring one catalog entry in line with freshly read metadata.

    Safe to re-run: unchanged input gives Unchanged and no writes. Stored
    positions are never overwritten; a reading that moved beyond
    POSITION_TOLERANCE is reported as a conflict and left alone.
    """

    def __init__(self, catalog: CatalogStore, cameras: CameraRegistry):
        self.catalog = catalog
        self.cameras = cameras

    def reconcile(self, path: str, meta: ResolvedMetadata) -> ReconcileResult:
        if meta.width is None:
            raise MissingWidth(path)
        if meta.height is None:
            raise MissingHeight(path)

        camera = self.cameras.resolve(meta.camera)
        camera_id = camera.id if camera is not None else None

        entry = self.catalog.find_by_path(path)
        if entry is None:
            entry = self.catalog.insert(
                path, meta.width, meta.height, meta.date, meta.rotation_degrees, camera_id
            )
            logger.info("Created %s as #%d", path, entry.id)
            modification = Modification.CREATED
        else:
            entry, modification = self._update_basics(entry, meta, camera_id)

        position = None
        if meta.position is not None:
            position = self._reconcile_position(entry, *meta.position)
        return ReconcileResult(modification=modification, entry=entry, position=position)

    def _update_basics(
        self, entry: CatalogEntry, meta: ResolvedMetadata, camera_id: Optional[int]
    ) -> tuple[CatalogEntry, Modification]:
        size = None
        if (meta.width, meta.height) != (entry.width, entry.height):
            size = (meta.width, meta.height)
        # A missing date never clears a stored one.
        date = meta.date if meta.date is not None and meta.date != entry.date else None
        new_camera = camera_id if camera_id is not None and camera_id != entry.camera_id else None

        if size is None and date is None and new_camera is None:
            logger.debug("No change for %s", entry.path)
            return entry, Modification.UNCHANGED

        updated = self.catalog.update_fields(entry.id, size=size, date=date, camera_id=new_camera)
        logger.info(
            "Updated %s: size=%s date=%s camera=%s", entry.path, size, date, new_camera
        )
        return updated, Modification.UPDATED

    def _reconcile_position(self, entry: CatalogEntry, lat: float, long: float) -> PositionOutcome:
        lat_micro, long_micro = to_micro_degrees(lat), to_micro_degrees(long)
        stored = self.catalog.find_position(entry.id)
        if stored is None:
            self.catalog.insert_position(entry.id, lat_micro, long_micro)
            logger.info("Position for %s is %s %s", entry.path, lat, long)
            return PositionOutcome.INSERTED

        stored_lat, stored_long = stored
        if (
            abs(stored_lat - lat_micro) > POSITION_TOLERANCE
            or abs(stored_long - long_micro) > POSITION_TOLERANCE
        ):
            logger.warning(
                "Position conflict for %s: stored %d %d, read %d %d; keeping stored",
                entry.path,
                stored_lat,
                stored_long,
                lat_micro,
                long_micro,
            )
            return PositionOutcome.CONFLICT
        return PositionOutcome.MATCHED
