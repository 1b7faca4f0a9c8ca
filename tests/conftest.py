from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

from photo_catalog.core.models import Camera, CatalogEntry
from photo_catalog.index import CameraRegistry, Reconciler


class MemoryCatalogStore:
    """In-memory CatalogStore that records every write."""

    def __init__(self) -> None:
        self.entries: dict[int, CatalogEntry] = {}
        self.positions: dict[int, tuple[int, int]] = {}
        self.writes: list[tuple] = []

    def find_by_path(self, path: str) -> Optional[CatalogEntry]:
        for entry in self.entries.values():
            if entry.path == path:
                return entry
        return None

    def insert(self, path, width, height, date, rotation, camera_id) -> CatalogEntry:
        entry = CatalogEntry(
            id=len(self.entries) + 1,
            path=path,
            width=width,
            height=height,
            date=date,
            rotation=rotation,
            camera_id=camera_id,
        )
        self.entries[entry.id] = entry
        self.writes.append(("insert", path))
        return entry

    def update_fields(self, photo_id, size=None, date=None, camera_id=None) -> CatalogEntry:
        changes: dict = {}
        if size is not None:
            changes["width"], changes["height"] = size
        if date is not None:
            changes["date"] = date
        if camera_id is not None:
            changes["camera_id"] = camera_id
        entry = self.entries[photo_id].model_copy(update=changes)
        self.entries[photo_id] = entry
        self.writes.append(("update", photo_id, tuple(sorted(changes))))
        return entry

    def find_position(self, photo_id: int) -> Optional[tuple[int, int]]:
        return self.positions.get(photo_id)

    def insert_position(self, photo_id: int, latitude: int, longitude: int) -> None:
        assert photo_id not in self.positions
        self.positions[photo_id] = (latitude, longitude)
        self.writes.append(("position", photo_id))


class MemoryCameraStore:
    def __init__(self) -> None:
        self.cameras: list[Camera] = []

    def find(self, manufacturer: str, model: str) -> Optional[Camera]:
        for camera in self.cameras:
            if (camera.manufacturer, camera.model) == (manufacturer, model):
                return camera
        return None

    def insert(self, manufacturer: str, model: str) -> Camera:
        camera = Camera(id=len(self.cameras) + 1, manufacturer=manufacturer, model=model)
        self.cameras.append(camera)
        return camera


@pytest.fixture
def catalog() -> MemoryCatalogStore:
    return MemoryCatalogStore()


@pytest.fixture
def camera_store() -> MemoryCameraStore:
    return MemoryCameraStore()


@pytest.fixture
def reconciler(catalog: MemoryCatalogStore, camera_store: MemoryCameraStore) -> Reconciler:
    return Reconciler(catalog, CameraRegistry(camera_store))


def _make_image(
    path: Path,
    size: tuple[int, int] = (10, 10),
    *,
    ifd0: dict | None = None,
    exif_ifd: dict | None = None,
    gps: dict | None = None,
) -> None:
    """Write a small JPEG with the given tags in IFD0 and the Exif/GPS sub-IFDs."""
    img = Image.new("RGB", size, color="red")
    exif = Image.Exif()
    for tag, value in (ifd0 or {}).items():
        exif[tag] = value
    if exif_ifd:
        exif[0x8769] = exif_ifd
    if gps:
        exif[0x8825] = gps
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, exif=exif)


@pytest.fixture
def make_image():
    return _make_image
