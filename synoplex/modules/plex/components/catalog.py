"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

Release Catalog Component

Fetches the Plex downloads manifest and decodes the Synology section into a
ReleaseCatalog:
- One HTTP GET with a bounded timeout, no retry
- Shape validation of the platform section; required release fields are
  checked only on the release that gets selected
- First-match release selection by build identifier
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from ....errors import DecodeError, FetchError, ReleaseNotFoundError
from ....utils.index import log_message


@dataclass(frozen=True)
class ReleaseEntry:
    """One downloadable package build from the manifest."""
    build: str
    url: str
    checksum: str
    label: str = ""
    distro: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReleaseEntry':
        """
        Decode one release entry. Missing fields decode as empty strings;
        required fields are only checked once the entry is selected.
        """
        if not isinstance(data, dict):
            raise DecodeError(f"release entry is not an object: {data!r}")
        values = {}
        for key in ("build", "url", "checksum", "label", "distro"):
            value = data.get(key)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise DecodeError(f"release field '{key}' is not a string: {data!r}")
            values[key] = value
        return cls(**values)

    def missing_fields(self) -> List[str]:
        """Names of the fields a download cannot proceed without."""
        return [key for key in ("url", "checksum") if not getattr(self, key).strip()]


@dataclass(frozen=True)
class ReleaseCatalog:
    """Parsed manifest for one platform, rebuilt on every run."""
    version: str
    releases: Tuple[ReleaseEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_manifest(cls, manifest: Any, platform: str = "Synology (DSM 7)") -> 'ReleaseCatalog':
        """
        Decode the manifest document.

        Args:
            manifest: Decoded JSON body
            platform: Key of the platform section under "nas"

        Raises:
            DecodeError: If the document does not have the expected shape
        """
        if not isinstance(manifest, dict):
            raise DecodeError("manifest is not a JSON object")
        nas = manifest.get("nas")
        if not isinstance(nas, dict):
            raise DecodeError("manifest has no 'nas' section")
        section = nas.get(platform)
        if not isinstance(section, dict):
            raise DecodeError(f"manifest has no '{platform}' section")

        version = section.get("version")
        if not isinstance(version, str) or not version.strip():
            raise DecodeError(f"'{platform}' section has no version")

        releases = section.get("releases")
        if not isinstance(releases, list):
            raise DecodeError(f"'{platform}' section has no releases list")

        return cls(version=version.strip(),
                   releases=tuple(ReleaseEntry.from_dict(r) for r in releases))

    def find(self, build_type: str) -> Optional[ReleaseEntry]:
        """Return the first release whose build equals build_type."""
        for release in self.releases:
            if release.build == build_type:
                return release
        return None


def select_release(catalog: ReleaseCatalog, build_type: str) -> ReleaseEntry:
    """
    Pick the release for the running platform.

    Raises:
        ReleaseNotFoundError: If no release has exactly this build identifier
        DecodeError: If the matching release has no url or checksum
    """
    release = catalog.find(build_type)
    if release is None:
        available = ", ".join(r.build for r in catalog.releases if r.build) or "none"
        raise ReleaseNotFoundError(f"no release for build '{build_type}' (available: {available})")
    missing = release.missing_fields()
    if missing:
        raise DecodeError(f"release for build '{build_type}' has no {' or '.join(missing)}")
    log_message(f"[CATALOG] Selected release {release.label or release.build} ({release.distro})", "DEBUG")
    return release


class ReleaseCatalogClient:
    """Retrieves the remote release manifest."""

    def __init__(self, manifest_url: str, platform: str = "Synology (DSM 7)",
                 timeout: float = 30, session: Optional[requests.Session] = None):
        self.manifest_url = manifest_url
        self.platform = platform
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self) -> ReleaseCatalog:
        """
        Download and decode the manifest.

        Raises:
            FetchError: On transport failure or a non-success status
            DecodeError: If the body is not the expected JSON document
        """
        log_message(f"[CATALOG] Fetching release manifest: {self.manifest_url}")
        try:
            response = self.session.get(self.manifest_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"{self.manifest_url}: {e}") from e

        try:
            manifest = response.json()
        except ValueError as e:
            raise DecodeError(f"manifest is not valid JSON: {e}") from e

        catalog = ReleaseCatalog.from_manifest(manifest, self.platform)
        log_message(f"[CATALOG] Manifest lists {len(catalog.releases)} releases for {self.platform}", "DEBUG")
        return catalog
