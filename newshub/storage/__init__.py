"""Object storage."""

from .object_store import MemoryObjectStorage, ObjectStorage, SupabaseStorage

__all__ = ["MemoryObjectStorage", "ObjectStorage", "SupabaseStorage"]
