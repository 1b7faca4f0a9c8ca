"""Catalog and camera store interfaces, with SQLAlchemy-backed implementations."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from photo_catalog.core.models import Camera, CatalogEntry

from .schema import CameraRow, PhotoRow, PositionRow


class CatalogStore(Protocol):
    def find_by_path(self, path: str) -> Optional[CatalogEntry]: ...

    def insert(
        self,
        path: str,
        width: int,
        height: int,
        date: Optional[datetime],
        rotation: int,
        camera_id: Optional[int],
    ) -> CatalogEntry: ...

    def update_fields(
        self,
        photo_id: int,
        size: Optional[tuple[int, int]] = None,
        date: Optional[datetime] = None,
        camera_id: Optional[int] = None,
    ) -> CatalogEntry: ...

    def find_position(self, photo_id: int) -> Optional[tuple[int, int]]: ...

    def insert_position(self, photo_id: int, latitude: int, longitude: int) -> None: ...


class CameraStore(Protocol):
    def find(self, manufacturer: str, model: str) -> Optional[Camera]: ...

    def insert(self, manufacturer: str, model: str) -> Camera: ...


def _to_entry(row: PhotoRow) -> CatalogEntry:
    return CatalogEntry(
        id=row.id,
        path=row.path,
        date=row.date,
        rotation=row.rotation,
        width=row.width,
        height=row.height,
        camera_id=row.camera_id,
        grade=row.grade,
        is_public=row.is_public,
    )


def _to_camera(row: CameraRow) -> Camera:
    return Camera(id=row.id, manufacturer=row.manufacturer, model=row.model)


class SqlCatalogStore:
    """CatalogStore over a SQLAlchemy session. Committing is left to the caller."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_path(self, path: str) -> Optional[CatalogEntry]:
        row = self.session.scalar(select(PhotoRow).where(PhotoRow.path == path))
        return _to_entry(row) if row is not None else None

    def insert(
        self,
        path: str,
        width: int,
        height: int,
        date: Optional[datetime],
        rotation: int,
        camera_id: Optional[int],
    ) -> CatalogEntry:
        row = PhotoRow(
            path=path,
            width=width,
            height=height,
            date=date,
            rotation=rotation,
            camera_id=camera_id,
        )
        self.session.add(row)
        self.session.flush()
        return _to_entry(row)

    def update_fields(
        self,
        photo_id: int,
        size: Optional[tuple[int, int]] = None,
        date: Optional[datetime] = None,
        camera_id: Optional[int] = None,
    ) -> CatalogEntry:
        values: dict[str, object] = {}
        if size is not None:
            values["width"], values["height"] = size
        if date is not None:
            values["date"] = date
        if camera_id is not None:
            values["camera_id"] = camera_id
        if values:
            # One statement so the detected changes land together.
            self.session.execute(update(PhotoRow).where(PhotoRow.id == photo_id).values(**values))
        row = self.session.get(PhotoRow, photo_id)
        if row is None:
            raise LookupError(f"Photo #{photo_id} not found")
        return _to_entry(row)

    def find_position(self, photo_id: int) -> Optional[tuple[int, int]]:
        row = self.session.scalar(select(PositionRow).where(PositionRow.photo_id == photo_id))
        return (row.latitude, row.longitude) if row is not None else None

    def insert_position(self, photo_id: int, latitude: int, longitude: int) -> None:
        self.session.add(PositionRow(photo_id=photo_id, latitude=latitude, longitude=longitude))
        self.session.flush()


class SqlCameraStore:
    def __init__(self, session: Session):
        self.session = session

    def find(self, manufacturer: str, model: str) -> Optional[Camera]:
        row = self.session.scalar(
            select(CameraRow).where(
                CameraRow.manufacturer == manufacturer, CameraRow.model == model
            )
        )
        return _to_camera(row) if row is not None else None

    def insert(self, manufacturer: str, model: str) -> Camera:
        row = CameraRow(manufacturer=manufacturer, model=model)
        self.session.add(row)
        self.session.flush()
        return _to_camera(row)
