"""Simple filesystem cache for fetched dataset payloads."""

from __future__ import annotations

import hashlib
import os
import time
from typing import Optional

from config import settings

DEFAULT_TTL = settings.CACHE_TTL


def cache_dir() -> str:
    # Resolved per call; settings.DATA_DIR may be patched after import
    return os.path.join(settings.DATA_DIR, "_cache")


def _key(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def _path(url: str) -> str:
    return os.path.join(cache_dir(), _key(url) + ".json")


def get(url: str, ttl: int = DEFAULT_TTL) -> Optional[str]:
    p = _path(url)
    if not os.path.exists(p):
        return None
    try:
        stat = os.stat(p)
        if time.time() - stat.st_mtime > ttl:
            return None
        with open(p, "r", encoding="utf-8") as fh:
            return fh.read()
    except OSError:
        return None


def set(url: str, content: str) -> None:
    os.makedirs(cache_dir(), exist_ok=True)
    with open(_path(url), "w", encoding="utf-8") as fh:
        fh.write(content)


def invalidate(url: str) -> bool:
    """Remove a cached entry; returns True if something was deleted."""
    p = _path(url)
    try:
        os.remove(p)
        return True
    except OSError:
        return False
