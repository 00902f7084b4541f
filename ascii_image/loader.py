#!/usr/bin/env python3
# ascii_image/loader.py
"""
Image provider for the render pipeline.

- Local paths and file:// URLs are opened directly.
- http(s) URLs go through a requests session with urllib3 Retry and are
  cached on disk under a SHA1 of the URL.
- Any decode or fetch failure raises ImageLoadError; the pipeline never
  runs on a partial image.
"""

from __future__ import annotations

import hashlib
import io
import logging
import os
import threading
from pathlib import Path
from typing import Tuple
from urllib.parse import unquote, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from PIL import Image, UnidentifiedImageError

from ascii_image.config import Config

logger = logging.getLogger(__name__)

__all__ = ["ImageLoader", "ImageLoadError"]


class ImageLoadError(RuntimeError):
    """The source image could not be fetched or decoded."""


def _is_remote(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


class ImageLoader:
    """
    Thread-safe image loader with an on-disk cache for remote sources.
    """

    def __init__(
        self,
        cache_dir: Path,
        user_agent: str,
        connect_timeout: float = 5.0,
        read_timeout: float = 15.0,
        retries: int = 3,
    ):
        self.cache_dir = Path(cache_dir)
        self.timeout: Tuple[float, float] = (connect_timeout, read_timeout)

        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent
        retry = Retry(
            total=retries,
            connect=retries,
            read=retries,
            backoff_factor=0.3,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET"]),
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: Config) -> "ImageLoader":
        n = cfg["network"]
        return cls(
            Path(n["cache_dir"]),
            n["user_agent"],
            connect_timeout=float(n["connect_timeout_s"]),
            read_timeout=float(n["read_timeout_s"]),
            retries=int(n["retries"]),
        )

    def _cache_path(self, url: str) -> Path:
        h = hashlib.sha1(url.encode("utf-8")).hexdigest()
        return self.cache_dir / h[:2] / f"{h}.img"

    @staticmethod
    def _decode(data: bytes, source: str) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageLoadError(f"cannot decode image {source}: {exc}") from exc
        if img.width < 1 or img.height < 1:
            raise ImageLoadError(f"image {source} has no pixels")
        return img

    def load(self, source: str) -> Image.Image:
        """Return a fully decoded Pillow image for a path or URL."""
        if not source:
            raise ImageLoadError("no image source given")
        if _is_remote(source):
            return self._load_remote(source)

        parsed = urlparse(source)
        path = unquote(parsed.path) if parsed.scheme == "file" else os.path.expanduser(source)
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as exc:
            raise ImageLoadError(f"cannot read image {source}: {exc}") from exc
        return self._decode(data, source)

    def _load_remote(self, url: str) -> Image.Image:
        p = self._cache_path(url)
        if p.exists():
            try:
                with self._lock:
                    data = p.read_bytes()
                return self._decode(data, url)
            except (OSError, ImageLoadError):
                logger.info("Dropping unreadable cache entry %s", p)
                try:
                    p.unlink()
                except OSError:
                    pass

        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ImageLoadError(f"cannot fetch {url}: {exc}") from exc
        if r.status_code != 200 or not r.content:
            raise ImageLoadError(f"cannot fetch {url}: HTTP {r.status_code}")

        img = self._decode(r.content, url)
        try:
            with self._lock:
                p.parent.mkdir(parents=True, exist_ok=True)
                p.write_bytes(r.content)
        except OSError as exc:
            logger.warning("Could not cache %s: %s", url, exc)
        return img

    def close(self) -> None:
        self.session.close()
