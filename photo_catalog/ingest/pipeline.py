from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from photo_catalog.core.env import CatalogConfig, configure_logging, load_dotenv_if_present
from photo_catalog.core.errors import CatalogError
from photo_catalog.core.models import CrawlSummary, PositionOutcome, ReconcileResult
from photo_catalog.index import (
    CameraRegistry,
    Reconciler,
    SqlCameraStore,
    SqlCatalogStore,
    init_db,
    session_factory,
)

from .exif_reader import read_metadata
from .resolver import resolve_metadata
from .scanner import PhotosDir

logger = logging.getLogger(__name__)


def process_file(photos: PhotosDir, path: str, reconciler: Reconciler) -> Optional[ReconcileResult]:
    """Read, resolve and reconcile one root-relative file. None means not an image."""
    meta = read_metadata(photos.get_raw_path(path))
    if meta is None:
        return None
    return reconciler.reconcile(path, resolve_metadata(meta))


def crawl(
    photos: PhotosDir,
    reconciler: Reconciler,
    *,
    only_in: str | Path = "",
    session: Session | None = None,
    time_budget: float | None = None,
) -> CrawlSummary:
    """Process every file below `only_in`, one at a time.

    Each file is its own unit of work: with a session it is committed on
    success and rolled back on failure. A failing file is counted and the
    crawl moves on. With `time_budget` (seconds) the crawl stops between files
    once the budget is spent; running it again picks up where it left off.
    """
    summary = CrawlSummary()
    started = time.monotonic()
    logger.info("Crawl: scanning %s", photos.get_raw_path(str(only_in)))
    for found in photos.walk(only_in):
        if time_budget is not None and time.monotonic() - started > time_budget:
            logger.info("Crawl: time budget of %.1fs spent, stopping", time_budget)
            summary.stopped_early = True
            break
        if found.error:
            logger.warning("Cannot read %s: %s", found.path, found.error)
            summary.failed += 1
            continue
        try:
            result = process_file(photos, found.path, reconciler)
            if session is not None:
                session.commit()
        except (CatalogError, SQLAlchemyError, OSError) as exc:
            if session is not None:
                session.rollback()
            logger.warning("Failed to save photo %s: %s", found.path, exc)
            summary.failed += 1
            continue

        if result is None:
            summary.skipped += 1
            continue
        summary.count(result.modification)
        if result.position is PositionOutcome.CONFLICT:
            summary.position_conflicts += 1

    logger.info(
        "Crawl: %d created, %d updated, %d unchanged, %d skipped, %d failed",
        summary.created,
        summary.updated,
        summary.unchanged,
        summary.skipped,
        summary.failed,
    )
    return summary


def build_reconciler(session: Session) -> Reconciler:
    return Reconciler(SqlCatalogStore(session), CameraRegistry(SqlCameraStore(session)))


def ingest_directory(
    root: str | Path,
    session: Session,
    *,
    only_in: str | Path = "",
    time_budget: float | None = None,
) -> CrawlSummary:
    """Crawl `root` (or its `only_in` subtree) into the catalog behind `session`."""
    return crawl(
        PhotosDir(root),
        build_reconciler(session),
        only_in=only_in,
        session=session,
        time_budget=time_budget,
    )


def run_ingest(config: CatalogConfig | None = None, only_in: str | Path = "") -> CrawlSummary:
    """Ingest using settings from the environment (and a .env file, if any)."""
    load_dotenv_if_present()
    configure_logging()
    config = config or CatalogConfig.from_env()
    engine = init_db(config.database_url)
    SessionLocal = session_factory(engine)
    with SessionLocal() as session:
        return ingest_directory(
            config.photos_dir, session, only_in=only_in, time_budget=config.time_budget
        )
