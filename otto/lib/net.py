from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from ..errors import TransferError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 64


def human_bytes(n: int) -> str:
    """Format a byte count with binary units, e.g. ``1.5 MiB``."""
    if n < 1024:
        return f"{n} B"
    size = float(n)
    for unit in ["KiB", "MiB", "GiB", "TiB"]:
        size /= 1024.0
        if size < 1024:
            return f"{size:.1f} {unit}"
    return f"{size / 1024.0:.1f} PiB"


def fetch_archive(url: str, dest: Path, *, timeout: Optional[float] = None) -> int:
    """Download ``url`` into ``dest``; return the number of bytes written.

    Only 2xx responses are accepted. No retries and, unless ``timeout`` is
    given, no timeout.
    """

    try:
        with requests.get(url, stream=True, timeout=timeout) as r:
            if not 200 <= r.status_code < 300:
                raise TransferError(f"HTTP {r.status_code} for {url}")

            try:
                length = int(r.headers.get("Content-Length") or 0)
            except ValueError:
                length = 0
            logger.info("Downloading %s", human_bytes(length) if length > 0 else "? bytes")

            written = 0
            with open(dest, "wb") as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    written += len(chunk)
    except requests.RequestException as e:
        raise TransferError(f"While downloading {url}: {e}") from e
    except OSError as e:
        raise TransferError(f"While writing {dest}: {e}") from e

    logger.debug("Wrote %d bytes to %s", written, dest)
    return written
