import os
import logging
import tempfile
import threading
from pathlib import Path
from typing import Union

import requests
from dotenv import load_dotenv

from models.errors import AssetUnavailableError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class AssetRepository:
    """
    Network and disk access for remote assets.
    No image logic here: bytes in, bytes out.
    """

    def __init__(self, timeout: float = None, session: requests.Session = None):
        self.timeout = timeout or float(os.getenv("HTTP_TIMEOUT", "60"))
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        # requests.Session is not thread-safe: one per thread
        if self._session is not None:
            return self._session
        if not hasattr(self._local, "session"):
            self._local.session = requests.Session()
        return self._local.session

    def fetch_bytes(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise AssetUnavailableError(f"Timed out after {self.timeout}s fetching {url}") from e
        except requests.RequestException as e:
            raise AssetUnavailableError(f"Could not fetch {url}: {e}") from e
        return response.content

    def fetch_json(self, url: str, params: dict = None) -> dict:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            raise AssetUnavailableError(f"Timed out after {self.timeout}s querying {url}") from e
        except (requests.RequestException, ValueError) as e:
            raise AssetUnavailableError(f"Upstream query failed for {url}: {e}") from e

    @staticmethod
    def write_atomic(data: bytes, path: Union[str, Path]) -> Path:
        """
        Write to a temp file in the same directory and rename over *path*,
        so concurrent readers never see a half-written file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return path
