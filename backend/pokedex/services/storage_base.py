"""
Pokédex API: Abstract Object Storage Interface
===============================================

What:  The narrow contract PokemonService and ImageService need from an
       object store: put a file, remove an object, build its public URL.
How:   S3ObjectStorage implements it with aioboto3. Tests plug in an
       in-memory implementation through the `get_object_storage` dependency.
Who:   Constructed once in the application lifespan and shared by every
       request.
"""

from abc import ABC, abstractmethod


class ObjectStorage(ABC):
    """
    Abstract object store holding uploaded Pokémon images.

    Contract:
        - upload_file() returns a publicly resolvable URL for the stored key
        - implementations translate their own failures into StorageError
        - start()/close() bracket the lifetime of any underlying client
    """

    async def start(self) -> None:
        """Open underlying clients. Called once at application startup."""

    async def close(self) -> None:
        """Release underlying clients. Called once at application shutdown."""

    @abstractmethod
    async def upload_file(self, path: str, key: str, content_type: str) -> str:
        """
        Upload the local file at `path` under `key`.

        Returns:
            The public URL of the stored object.

        Raises:
            StorageError: the object could not be stored.
        """
        ...

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        """Remove `key` from the store. Missing keys are not an error."""
        ...

    @abstractmethod
    def public_url(self, key: str) -> str:
        """The URL clients use to fetch `key`."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the store is reachable with the configured credentials."""
        ...
