"""File storage backends."""

from bunny_file_storage.backends.files.bunny import BunnyFileStorage
from bunny_file_storage.backends.files.local import LocalFileStorage

__all__ = ["BunnyFileStorage", "LocalFileStorage"]
