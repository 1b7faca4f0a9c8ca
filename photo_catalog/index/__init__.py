"""Catalog storage and reconciliation for Photo Catalog."""

from .cameras import CameraRegistry
from .reconciler import POSITION_TOLERANCE, Reconciler, to_micro_degrees
from .schema import (
    Base,
    CameraRow,
    PhotoRow,
    PositionRow,
    create_engine_from_url,
    init_db,
    session_factory,
)
from .store import CameraStore, CatalogStore, SqlCameraStore, SqlCatalogStore

__all__ = [
    "Base",
    "CameraRegistry",
    "CameraRow",
    "CameraStore",
    "CatalogStore",
    "PhotoRow",
    "POSITION_TOLERANCE",
    "PositionRow",
    "Reconciler",
    "SqlCameraStore",
    "SqlCatalogStore",
    "create_engine_from_url",
    "init_db",
    "session_factory",
    "to_micro_degrees",
]
