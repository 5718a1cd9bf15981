"""
Persistent on-disk cache backend.

One pickle file per key, named ``<hex-key>.bin``. The file's mtime is the
only recency and TTL signal; reads never touch it. Pruning is best-effort:
processes sharing a directory are not coordinated, and filesystem errors
degrade the cache towards doing nothing rather than reaching the caller.
"""

import logging
import os
import pickle
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from .base import BaseCache

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".bin"
DEFAULT_CACHE_DIR = Path(tempfile.gettempdir()) / "llm_meter_cache"


@dataclass(frozen=True)
class DiskCacheEntry:
    """A cache file as seen during a directory scan."""
    path: Path
    size: int
    mtime: float


class DiskCache(BaseCache):
    """File-per-key cache with best-effort max-entries and TTL pruning."""

    def __init__(
        self,
        cache_dir: Optional[str] = None,
        max_entries: Optional[int] = None,
        ttl_ms: Optional[float] = None,
    ):
        """Create a disk cache, creating its directory if needed.

        Args:
            cache_dir: Directory for cache files (defaults to a temp dir)
            max_entries: Optional cap on files kept, enforced on writes
            ttl_ms: Optional time-to-live based on file mtime, in milliseconds
        """
        if max_entries is not None and max_entries < 0:
            raise ValueError("max_entries cannot be negative")
        if ttl_ms is not None and ttl_ms < 0:
            raise ValueError("ttl_ms cannot be negative")

        self.cache_dir = Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR
        self.max_entries = max_entries
        self.ttl_ms = ttl_ms
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create cache directory %s: %s", self.cache_dir, e)

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{CACHE_SUFFIX}"

    def _cache_files(self) -> List[Path]:
        try:
            return [
                self.cache_dir / name
                for name in os.listdir(self.cache_dir)
                if name.endswith(CACHE_SUFFIX)
            ]
        except OSError:
            return []

    def _is_expired(self, path: Path) -> bool:
        if self.ttl_ms is None:
            return False
        try:
            age_ms = (time.time() - path.stat().st_mtime) * 1000.0
        except OSError:
            return True
        return age_ms > self.ttl_ms

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except OSError:
            return False

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None

        if self._is_expired(path):
            self._unlink(path)
            return None

        try:
            with open(path, "rb") as f:
                return pickle.load(f)
        except Exception:
            logger.debug("Unreadable cache file %s; treating as miss", path, exc_info=True)
            return None

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_path = None
        try:
            payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
            fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_path, path)
            tmp_path = None
        except Exception:
            logger.debug("Could not write cache file %s", path, exc_info=True)
            return
        finally:
            if tmp_path is not None:
                self._unlink(Path(tmp_path))

        self.prune()

    def prune(self) -> int:
        """Delete expired files, then the oldest files beyond max_entries.

        Returns:
            Number of files deleted
        """
        deleted = 0

        if self.ttl_ms is not None:
            for path in self._cache_files():
                if self._is_expired(path) and self._unlink(path):
                    deleted += 1

        if self.max_entries is not None:
            remaining = self.entries()
            excess = len(remaining) - self.max_entries
            if excess > 0:
                remaining.sort(key=lambda entry: entry.mtime)
                for entry in remaining[:excess]:
                    if self._unlink(entry.path):
                        deleted += 1

        if deleted:
            logger.debug("Pruned %d cache files from %s", deleted, self.cache_dir)
        return deleted

    def entries(self) -> List[DiskCacheEntry]:
        """Scan the cache directory. Files vanishing mid-scan are skipped."""
        entries = []
        for path in self._cache_files():
            try:
                stat = path.stat()
            except OSError:
                continue
            entries.append(DiskCacheEntry(path=path, size=stat.st_size, mtime=stat.st_mtime))
        return entries

    def clear(self) -> int:
        """Delete every cache file; one failure does not stop the sweep.

        Returns:
            Number of files deleted
        """
        return sum(1 for path in self._cache_files() if self._unlink(path))

    def __len__(self) -> int:
        return len(self._cache_files())
