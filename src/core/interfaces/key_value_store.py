"""Abstract interface for the ledger's durable key-value store."""

from abc import ABC, abstractmethod


class IKeyValueStore(ABC):
    """String-keyed store of serialized ledger snapshots.

    No atomicity is promised across keys; each ``set`` stands alone.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get the stored value for a key, or None if absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Create or overwrite the value for a key."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """List stored keys in lexicographic order."""
        pass

    async def get_many(self, keys: list[str]) -> dict[str, str | None]:
        """Fetch several keys; missing keys map to None."""
        return {key: await self.get(key) for key in keys}

    async def set_many(self, values: dict[str, str]) -> None:
        """Write several keys one by one."""
        for key, value in values.items():
            await self.set(key, value)
