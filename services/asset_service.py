from __future__ import annotations

import os
import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from models.image import Image
from models.errors import AssetUnavailableError
from repositories.asset_repository import AssetRepository
from services.image_service import ImageService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

PUBLIC_DIR = os.getenv("PUBLIC_DIR", "public")
BG_URL = os.getenv(
    "BG_URL",
    "https://blogger.googleusercontent.com/img/b/R29vZ2xl/AVvXsEj9IP9iQ133jhNCt9i77y-Cyq2Jqj6HEc29WF2m0sIT6WLgWgNTdRf1HGP7F-YvytM2nJqHltafjTCwza4SlkJhZoNsaxyszIWKDYdDmTSfK_uLTyVUyaX9bUJicbsQK3aIciMcKg6yv_nOzKm3CMFvdMk3yIgcjCbqAKaOpe7U7gX9KcGJDoN58hO7VK8x/s1280/1000026837.jpg",
)
LOGO_URL = os.getenv(
    "LOGO_URL",
    "https://img.utdstc.com/icon/931/722/9317221e8277cdfa4d3cf2891090ef5e83412768564665bedebb03f8f86dc5ae:200",
)


class AssetService:
    """
    Owns the public directory and the decoration assets cached in it.

    Lifecycle:
        1. ``ensure_assets()`` once before serving; downloads whatever is missing.
        2. ``background()`` / ``logo()`` decode the cached file on first use and
           keep the result for the life of the process, read-only.
        3. Deleting the files and calling ``ensure_assets()`` + ``reset()``
           rebuilds the cache. Nothing reinitialises it mid-request.
    """

    BACKGROUND_NAME = "bg.png"
    LOGO_NAME = "logo.png"

    def __init__(self,
                 public_dir: str | Path = PUBLIC_DIR,
                 background_url: str = BG_URL,
                 logo_url: str = LOGO_URL,
                 asset_repository: AssetRepository = None,
                 image_service: ImageService = None):
        self.public_dir = Path(public_dir)
        self.background_url = background_url
        self.logo_url = logo_url
        self.asset_repository = asset_repository or AssetRepository()
        self.image_service = image_service or ImageService()
        self._lock = threading.Lock()
        self._cache: Dict[str, Optional[Image]] = {}

    @property
    def background_path(self) -> Path:
        return self.public_dir / self.BACKGROUND_NAME

    @property
    def logo_path(self) -> Path:
        return self.public_dir / self.LOGO_NAME

    def ensure_public_dir(self) -> Path:
        self.public_dir.mkdir(parents=True, exist_ok=True)
        return self.public_dir

    def _download_if_missing(self, url: str, path: Path) -> None:
        if path.exists() or not url:
            return
        data = self.asset_repository.fetch_bytes(url)
        self.asset_repository.write_atomic(data, path)
        logger.info(f"Downloaded {path.name} ({len(data)} bytes)")

    def ensure_assets(self) -> None:
        """
        Download background and logo into the public directory if absent.
        Failures are logged; the builder falls back without them.
        """
        self.ensure_public_dir()
        for url, path in ((self.background_url, self.background_path),
                          (self.logo_url, self.logo_path)):
            try:
                self._download_if_missing(url, path)
            except (AssetUnavailableError, OSError) as e:
                logger.warning(f"Could not cache {path.name}: {e}")

    def _load_cached(self, key: str, path: Path, keep_alpha: bool) -> Optional[Image]:
        if key in self._cache:
            return self._cache[key]
        with self._lock:
            if key not in self._cache:
                image = None
                if path.exists():
                    try:
                        image = self.image_service.load(path, keep_alpha=keep_alpha)
                    except (FileNotFoundError, ValueError) as e:
                        logger.warning(f"Cached {path.name} is unreadable: {e}")
                self._cache[key] = image
        return self._cache[key]

    def background(self) -> Optional[Image]:
        return self._load_cached("background", self.background_path, keep_alpha=False)

    def logo(self) -> Optional[Image]:
        return self._load_cached("logo", self.logo_path, keep_alpha=True)

    def reset(self) -> None:
        with self._lock:
            self._cache.clear()

    def output_path(self, filename: str) -> Path:
        return self.ensure_public_dir() / filename
