"""In-process key-value store, for tests and throwaway sessions."""

from src.core.interfaces.key_value_store import IKeyValueStore


class InMemoryKeyValueStore(IKeyValueStore):
    """Dictionary-backed store; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return sorted(self._data)

    def dump(self) -> dict[str, str]:
        """Copy of the raw contents."""
        return dict(self._data)
