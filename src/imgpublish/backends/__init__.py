"""Storage backends images are uploaded to.

Exports
-------
StorageBackend
    Protocol every backend satisfies.
R2Backend
    Cloudflare R2 (S3-compatible) backend.
"""

from .base import StorageBackend
from .r2 import R2Backend

__all__ = [
    "R2Backend",
    "StorageBackend",
]
