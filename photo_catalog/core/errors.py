from __future__ import annotations


class CatalogError(RuntimeError):
    """Base error for problems that reject a single file."""


class UnknownOrientation(CatalogError):
    def __init__(self, code: int):
        super().__init__(f"Unknown image orientation: {code}")
        self.code = code


class MissingWidth(CatalogError):
    def __init__(self, path: str):
        super().__init__(f"No width known for {path}")
        self.path = path


class MissingHeight(CatalogError):
    def __init__(self, path: str):
        super().__init__(f"No height known for {path}")
        self.path = path


class FieldError(CatalogError):
    """A single metadata field had an unexpected type or cardinality."""


class ImageTooLarge(CatalogError):
    """Pillow refused to open the image as a possible decompression bomb."""
