"""External storage backends."""

from .base import AccessMode, ExternalNode, ExternalStorage
from .directory import DirectoryStorage, reference_to_path

__all__ = [
    "AccessMode",
    "DirectoryStorage",
    "ExternalNode",
    "ExternalStorage",
    "reference_to_path",
]
