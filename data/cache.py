"""In-memory TTL cache for decoded avatar thumbnails."""

import time


class TTLCache:
    """Byte blobs kept in memory for ``ttl`` seconds after they are set."""

    def __init__(self, ttl: int) -> None:
        self.ttl = ttl
        self._store: dict[str, tuple[bytes, float]] = {}

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> bytes | None:
        """Get a cached blob, or None if expired/missing."""
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() > expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        self._store[key] = (value, time.monotonic() + (self.ttl if ttl is None else ttl))

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def cleanup(self) -> int:
        """Remove expired entries. Returns count of removed entries."""
        now = time.monotonic()
        expired = [k for k, (_, exp) in self._store.items() if now > exp]
        for k in expired:
            del self._store[k]
        return len(expired)
