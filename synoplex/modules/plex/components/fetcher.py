"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

Release Fetcher Component

Makes sure a verified copy of the release package is present in the working
directory:
- Reuses an existing file when its checksum matches the manifest
- Deletes a file whose checksum does not match and downloads again
- Streams the download to a .part file and renames it into place
- Refuses a freshly downloaded file whose checksum does not match
"""

import os
import posixpath
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

import requests

from ....errors import ChecksumMismatchError, DownloadError
from ....utils.index import checksums_match, compute_file_checksum, log_message
from .catalog import ReleaseEntry

CHUNK_SIZE = 65536
PARTIAL_SUFFIX = ".part"


def artifact_file_name(url: str) -> str:
    """
    Derive the local file name from the last path segment of a download URL.

    Raises:
        DownloadError: If the URL path has no usable file name
    """
    name = posixpath.basename(unquote(urlparse(url).path))
    if not name or name in (".", ".."):
        raise DownloadError(f"cannot derive a file name from {url!r}")
    return name


class ReleaseFetcher:
    """Downloads and verifies release packages."""

    def __init__(self, timeout: float = 300, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def ensure(self, release: ReleaseEntry, work_dir: Union[str, Path]) -> Path:
        """
        Return the path of a verified package for this release.

        Args:
            release: Release selected from the catalog
            work_dir: Directory holding downloaded packages

        Returns:
            Path: Local package whose checksum equals release.checksum

        Raises:
            DownloadError: If the transfer fails
            ChecksumMismatchError: If the downloaded file does not verify
        """
        local_path = Path(work_dir) / artifact_file_name(release.url)

        if local_path.exists():
            log_message(f"[FETCH] File already exists: {local_path}")
            log_message(f"[FETCH] URL: {release.url}")
            checksum = compute_file_checksum(local_path)
            log_message(f"[FETCH] Calculated checksum: {checksum}")
            log_message(f"[FETCH] Expected checksum: {release.checksum}")
            if checksums_match(checksum, release.checksum):
                log_message("[FETCH] ✓ Checksum match, reusing downloaded package")
                return local_path
            log_message("[FETCH] Checksum mismatch, forcing download", "WARNING")
            try:
                local_path.unlink()
            except OSError as e:
                raise DownloadError(f"cannot remove stale package {local_path}: {e}") from e

        size = self._download(release.url, local_path)

        checksum = compute_file_checksum(local_path)
        log_message(f"[FETCH] Size: {size} bytes")
        log_message(f"[FETCH] Calculated checksum: {checksum}")
        log_message(f"[FETCH] Expected checksum: {release.checksum}")
        if not checksums_match(checksum, release.checksum):
            raise ChecksumMismatchError(local_path, release.checksum, checksum)

        log_message(f"[FETCH] ✓ Downloaded and verified {local_path.name}")
        return local_path

    def _download(self, url: str, local_path: Path) -> int:
        """Stream url into local_path, returning the number of bytes written."""
        partial_path = local_path.with_name(local_path.name + PARTIAL_SUFFIX)
        log_message(f"[FETCH] Downloading: {url}")

        written = 0
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                if response.status_code != requests.codes.ok:
                    raise DownloadError(f"{url}: HTTP {response.status_code} {response.reason}")
                with open(partial_path, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)
            os.replace(partial_path, local_path)
        except requests.RequestException as e:
            self._discard(partial_path)
            raise DownloadError(f"{url}: {e}") from e
        except OSError as e:
            self._discard(partial_path)
            raise DownloadError(f"cannot write {local_path}: {e}") from e
        except DownloadError:
            self._discard(partial_path)
            raise

        return written

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            log_message(f"[FETCH] Could not remove partial download {path}: {e}", "WARNING")
