"""Sequential streamed file downloading."""

import logging
from pathlib import Path
from typing import Optional, Callable, Dict

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import TransferError
from .models import StreamDescriptor

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

CHUNK_SIZE = 1024 * 64


def build_session(headers: Optional[Dict[str, str]] = None) -> requests.Session:
    """Session that retries transient 5xx responses at the HTTP layer."""
    session = requests.Session()
    retries = Retry(total=5, backoff_factor=1, status_forcelist=[500, 502, 503, 504])
    session.mount('https://', HTTPAdapter(max_retries=retries))
    session.mount('http://', HTTPAdapter(max_retries=retries))
    if headers:
        session.headers.update(headers)
    return session


class StreamFetcher:
    """Streams one remote media stream to disk, reporting (bytes_so_far, total_bytes)."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 60):
        self.session = session or build_session()
        self.timeout = timeout

    def fetch(self, stream: StreamDescriptor, destination: Path,
              progress_callback: Optional[ProgressCallback] = None) -> Path:
        """Downloads *stream* to *destination*. Partial files are left for the caller."""
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        downloaded = 0
        total = 0
        content_length = None

        try:
            with self.session.get(stream.url, headers=stream.http_headers or None,
                                  stream=True, timeout=self.timeout) as r:
                r.raise_for_status()

                content_length = r.headers.get('content-length')
                if content_length:
                    total = int(content_length)

                with open(destination, 'wb') as f:
                    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            downloaded += len(chunk)
                            if progress_callback:
                                progress_callback(downloaded, total)
        except requests.RequestException as e:
            raise TransferError(f"Transfer of format {stream.format_id} failed: {e}") from e
        except OSError as e:
            raise TransferError(f"Could not write {destination}: {e}") from e

        if content_length and downloaded < total:
            raise TransferError(f"Download incomplete: Expected {total}, got {downloaded}")

        logger.debug("Fetched %s (%d bytes) -> %s", stream.format_id, downloaded, destination)
        return destination
