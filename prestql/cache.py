"""Response caching stored in per-key files with expiry."""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import dataclass, field

from slugify import slugify

logger = logging.getLogger(__name__)


@dataclass
class CacheEndpoint:
    """A caching rule for one endpoint path; ``time`` is in minutes."""

    endpoint: str
    time: int = 10
    enabled: bool = True


@dataclass
class CacheSettings:
    """Cache configuration: global switch, default lifetime and endpoint rules."""

    enabled: bool = False
    time: int = 10
    storage_path: str = "./"
    suffix_file: str = ".cache.prestd.db"
    endpoints: list[CacheEndpoint] = field(default_factory=list)

    def endpoint_rules(self, uri: str) -> tuple[bool, int]:
        """Return whether ``uri`` is cached and for how many minutes.

        With no endpoint rules every endpoint follows the global switch; with
        rules only listed endpoints are cached.
        """
        for endpoint in self.endpoints:
            if endpoint.endpoint == uri:
                return True, endpoint.time
        return self.enabled and not self.endpoints, self.time


class ResponseCache:
    """Stores response bodies keyed by request URL, one file per key."""

    def __init__(self, settings: CacheSettings) -> None:
        self.settings = settings
        self._lock = threading.Lock()

    def _path(self, key: str) -> str:
        name = slugify(key) if key else key
        return os.path.join(
            self.settings.storage_path, f"{name}{self.settings.suffix_file}"
        )

    def _load(self, path: str) -> dict[str, list]:
        try:
            with open(path, encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning("discarding corrupt cache file %s", path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        """Return the cached value for ``key``, or None if absent or expired."""
        path = self._path(key)
        with self._lock:
            try:
                entries = self._load(path)
            except OSError as exc:
                logger.error("could not open cache %s: %s", path, exc)
                self.settings.enabled = False
                return None
        entry = entries.get(key)
        if not entry:
            return None
        value, expires_at = entry
        if expires_at is not None and time.time() >= expires_at:
            return None
        return value

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` if caching applies to its endpoint."""
        uri = key.split("?")[0]
        rule, minutes = self.settings.endpoint_rules(uri)
        if not self.settings.enabled or not rule:
            return
        path = self._path(key)
        with self._lock:
            try:
                entries = self._load(path)
                now = time.time()
                entries = {
                    k: v
                    for k, v in entries.items()
                    if v[1] is None or v[1] > now
                }
                entries[key] = [value, now + minutes * 60]
                tmp = f"{path}.tmp"
                with open(tmp, "w", encoding="utf-8") as handle:
                    json.dump(entries, handle)
                os.replace(tmp, path)
            except OSError as exc:
                logger.error("could not write cache %s: %s", path, exc)
                self.settings.enabled = False