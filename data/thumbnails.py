"""Avatar thumbnail cache: PNG files on disk behind an in-memory TTL layer."""

import hashlib
from io import BytesIO
from pathlib import Path
import structlog
from PIL import Image, ImageOps, UnidentifiedImageError
from config.constants import AVATAR_KEY_PREFIX
from data.cache import TTLCache

log = structlog.get_logger(__name__)


def avatar_cache_key(account_name: str) -> str:
    return f"{AVATAR_KEY_PREFIX}{account_name}"


class ThumbnailCache:
    """Stores square avatar thumbnails keyed by account name."""

    def __init__(self, cache_dir: str | Path, memory_ttl: int = 3600) -> None:
        self.cache_dir = Path(cache_dir)
        self._memory = TTLCache(memory_ttl)

    def _path_for(self, cache_key: str) -> Path:
        # Account names carry '@', '/' and ':'; hash them into a flat file name.
        digest = hashlib.sha1(cache_key.encode()).hexdigest()
        return self.cache_dir / f"{digest}.png"

    @staticmethod
    def _render(data: bytes, dimension: int) -> bytes:
        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                if image.mode not in ("RGB", "RGBA"):
                    image = image.convert("RGBA")
                thumb = ImageOps.fit(image, (dimension, dimension), method=Image.Resampling.LANCZOS)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ValueError(f"Avatar data is not a decodable image: {e}") from e
        out = BytesIO()
        thumb.save(out, format="PNG")
        return out.getvalue()

    def add_avatar_to_cache(self, account_name: str, data: bytes, dimension: int) -> str:
        """Scale ``data`` to a ``dimension`` square and cache it. Returns the cache key."""
        cache_key = avatar_cache_key(account_name)
        png = self._render(data, dimension)

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self._path_for(cache_key)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(png)
        tmp.replace(path)
        self._memory.set(cache_key, png)

        log.debug("avatar_cached", account=account_name, dimension=dimension, size=len(png))
        return cache_key

    def get_avatar(self, cache_key: str) -> bytes | None:
        cached = self._memory.get(cache_key)
        if cached is not None:
            return cached
        path = self._path_for(cache_key)
        if not path.exists():
            return None
        png = path.read_bytes()
        self._memory.set(cache_key, png)
        return png

    def remove_avatar_from_cache(self, account_name: str) -> None:
        cache_key = avatar_cache_key(account_name)
        self._memory.delete(cache_key)
        self._path_for(cache_key).unlink(missing_ok=True)
        log.debug("avatar_removed_from_cache", account=account_name)
