"""
Pytest fixtures for synoplex tests.

Network and subprocess access is always mocked: requests sessions are
replaced by MagicMock objects returning FakeResponse instances and
subprocess.run is patched per test.
"""

import copy
import hashlib
import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from synoplex.modules.plex.components.catalog import ReleaseEntry
from synoplex.modules.plex.config import PlexUpdaterConfig


# ═══════════════════════════════════════════════════════════════════════════════
# Fixture Data
# ═══════════════════════════════════════════════════════════════════════════════

FIXTURES_DIR = Path(__file__).parent / "fixtures"
with open(FIXTURES_DIR / "manifest.json") as f:
    MANIFEST = json.load(f)

PACKAGE_BYTES = b"PlexMediaServer spk payload " * 1024


def sha1_hex(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


class FakeResponse:
    """Minimal stand-in for requests.Response, usable as a context manager."""

    def __init__(self, status_code=200, body=b"", json_data=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._body = body
        self._json_data = json_data

    def json(self):
        if self._json_data is not None:
            return self._json_data
        return json.loads(self._body.decode())

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} {self.reason}", response=self)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self._body), chunk_size):
            yield self._body[i:i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def completed(args=None, returncode=0, stdout="", stderr=""):
    """Build a subprocess.CompletedProcess result."""
    return subprocess.CompletedProcess(args or [], returncode, stdout=stdout, stderr=stderr)


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def manifest():
    """Plex downloads manifest with three Synology DSM 7 builds."""
    return copy.deepcopy(MANIFEST)


@pytest.fixture
def package_bytes():
    return PACKAGE_BYTES


@pytest.fixture
def release():
    """x86_64 release whose checksum matches PACKAGE_BYTES."""
    return ReleaseEntry(
        build="linux-x86_64",
        url="https://downloads.plex.tv/plex-media-server-new/1.32.8/PlexMediaServer-1.32.8-x86_64_dsm7.spk",
        checksum=sha1_hex(PACKAGE_BYTES),
        label="Intel 64-bit",
        distro="synology"
    )


@pytest.fixture
def config(tmp_path):
    """Configuration pointing the working directory at a temp dir."""
    return PlexUpdaterConfig(work_dir=str(tmp_path), synopkg_bin="/bin/synopkg",
                             synonotify_bin="/bin/synonotify")


@pytest.fixture
def session():
    """Mock requests session."""
    return MagicMock(spec=requests.Session)
