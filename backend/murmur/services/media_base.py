"""
Murmur Backend — Abstract Media Store Interface
=================================================

What:  Contract for the external image host that posts and profiles use.
How:   Concrete stores (local disk, S3-compatible) implement upload(), delete()
       and health_check(). Services receive a store through dependency
       injection and never know which one is configured.

Contract:
    - upload() accepts the client's base64 data URI, validates it, stores the
      bytes, and returns a stable URL. Only that URL is persisted.
    - delete() is best-effort: it returns False and logs instead of raising,
      because a dangling asset on the host must not fail a profile update.
    - Host failures on upload surface as MediaStorageError.
"""

from abc import ABC, abstractmethod


class MediaStore(ABC):
    """Abstract interface for the image host."""

    @abstractmethod
    async def upload(self, data_uri: str) -> str:
        """
        Store an image and return its public URL.

        Raises:
            ValidationError: payload is not an acceptable image
            MediaStorageError: the host could not store it
        """
        ...

    @abstractmethod
    async def delete(self, url: str) -> bool:
        """Remove the asset behind `url`. Returns True if something was deleted."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability probe used by GET /health."""
        ...
