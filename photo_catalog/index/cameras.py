from __future__ import annotations

import logging
from typing import Optional

from photo_catalog.core.models import Camera

from .store import CameraStore

logger = logging.getLogger(__name__)


class CameraRegistry:
    """Lookup-or-create for cameras keyed by (manufacturer, model).

    Lookup and insert are separate store calls, so only one ingest process
    should write at a time.
    """

    def __init__(self, store: CameraStore):
        self.store = store

    def get_or_create(self, manufacturer: str, model: str) -> Camera:
        camera = self.store.find(manufacturer, model)
        if camera is None:
            camera = self.store.insert(manufacturer, model)
            logger.info("Created camera #%d: %s %s", camera.id, manufacturer, model)
        return camera

    def resolve(self, identity: Optional[tuple[str, str]]) -> Optional[Camera]:
        if identity is None:
            return None
        return self.get_or_create(*identity)
