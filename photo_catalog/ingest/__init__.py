"""Ingest pipeline for crawling photos and reading their capture metadata."""

from .exif_reader import read_metadata
from .pipeline import crawl, ingest_directory, process_file, run_ingest
from .resolver import resolve_metadata, rotation_degrees
from .scanner import PhotosDir

__all__ = [
    "PhotosDir",
    "crawl",
    "ingest_directory",
    "process_file",
    "read_metadata",
    "resolve_metadata",
    "rotation_degrees",
    "run_ingest",
]
