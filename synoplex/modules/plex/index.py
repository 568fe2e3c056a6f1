"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""
Plex Media Server Update Module

Keeps the PlexMediaServer package on a Synology DSM 7 box at the latest
release published in the Plex downloads manifest.

Run sequence:
- Read the installed version from synopkg and fetch the release manifest
- Compare versions, ignoring the build hash suffix
- If stale: notify, download and verify the package, stop/install/start,
  read the new version back and notify again

Every failure is fatal and propagates as an UpdaterError. The only state kept
between runs is the downloaded package, which is reused when its checksum
still matches.
"""

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...errors import NotifyError
from ...utils.index import log_message
from ...utils.versions import compare, normalize
from .components import (
    ReleaseCatalogClient,
    ReleaseFetcher,
    SynoNotifier,
    SynoPackageManager,
    select_release
)
from .config import PlexUpdaterConfig, load_config


class UpdateState(enum.Enum):
    START = "start"
    CATALOG_FETCHED = "catalog_fetched"
    COMPARED = "compared"
    UP_TO_DATE = "up_to_date"
    STALE_NOTIFIED = "stale_notified"
    DOWNLOADED = "downloaded"
    INSTALLED = "installed"
    DONE_NOTIFIED = "done_notified"


@dataclass
class UpdateResult:
    """Outcome of one update run."""
    state: UpdateState = UpdateState.START
    installed_version: Optional[str] = None
    latest_version: Optional[str] = None
    updated_version: Optional[str] = None
    artifact_path: Optional[Path] = None
    update_available: bool = False
    notifications_sent: int = 0

    @property
    def updated(self) -> bool:
        return self.state == UpdateState.DONE_NOTIFIED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "updated": self.updated,
            "update_available": self.update_available,
            "state": self.state.value,
            "old_version": self.installed_version,
            "latest_version": self.latest_version,
            "new_version": self.updated_version,
            "artifact": str(self.artifact_path) if self.artifact_path else None,
            "notifications_sent": self.notifications_sent
        }


class PlexUpdateOrchestrator:
    """
    Sequences a single Plex update run.

    Collaborators are built from the configuration unless passed in.
    """

    def __init__(self, config: PlexUpdaterConfig,
                 catalog_client: Optional[ReleaseCatalogClient] = None,
                 fetcher: Optional[ReleaseFetcher] = None,
                 package_manager: Optional[SynoPackageManager] = None,
                 notifier: Optional[SynoNotifier] = None):
        self.config = config
        self.catalog_client = catalog_client or ReleaseCatalogClient(
            config.manifest_url, config.manifest_platform, timeout=config.request_timeout)
        self.fetcher = fetcher or ReleaseFetcher(timeout=config.download_timeout)
        self.package_manager = package_manager or SynoPackageManager(
            config.package_name, config.synopkg_bin,
            timeout=config.command_timeout, install_timeout=config.install_timeout)
        self.notifier = notifier or SynoNotifier(config.synonotify_bin, timeout=config.command_timeout)

    def _notify(self, result: UpdateResult, message: str) -> None:
        try:
            self.notifier.notify(self.config.notification_tag, self.config.notification_template, message)
        except NotifyError as e:
            if self.config.notify_failures_fatal:
                raise
            log_message(f"Notification failed, continuing: {e}", "WARNING")
            return
        result.notifications_sent += 1

    def run(self, check_only: bool = False, download_only: bool = False) -> UpdateResult:
        """
        Execute the update run.

        Args:
            check_only: Stop after the version comparison
            download_only: Fetch and verify the package but leave the installed one alone

        Returns:
            UpdateResult: Final state and versions seen

        Raises:
            UpdaterError: On any failure; nothing is retried or rolled back
        """
        result = UpdateResult()
        package = self.config.package_name

        installed = self.package_manager.version()
        result.installed_version = installed
        log_message(f"Installed version: {installed}")

        catalog = self.catalog_client.fetch()
        result.latest_version = catalog.version
        result.state = UpdateState.CATALOG_FETCHED
        log_message(f"Latest version: {catalog.version}")

        installed_tag = normalize(installed)
        latest_tag = normalize(catalog.version)
        stale = compare(installed_tag, latest_tag) < 0
        result.state = UpdateState.COMPARED
        result.update_available = stale

        if not stale:
            log_message("No new version available")
            result.state = UpdateState.UP_TO_DATE
            return result

        log_message(f"New version available: {latest_tag}")
        release = select_release(catalog, self.config.build_type)

        if check_only:
            log_message(f"Check-only mode: {package} {installed_tag} → {latest_tag} "
                        f"available for {release.build}")
            return result

        if not download_only:
            self._notify(result, f"Synology Plex Updater detected a new version: {latest_tag}")
            result.state = UpdateState.STALE_NOTIFIED

        result.artifact_path = self.fetcher.ensure(release, self.config.work_path)
        result.state = UpdateState.DOWNLOADED

        if download_only:
            log_message(f"Download-only mode: package ready at {result.artifact_path}")
            return result

        self.package_manager.apply(result.artifact_path)
        result.state = UpdateState.INSTALLED

        updated = self.package_manager.version()
        result.updated_version = updated
        log_message(f"Updated version: {updated}")

        self._notify(result, f"Synology Plex Updater has updated {package} to version: {updated}")
        result.state = UpdateState.DONE_NOTIFIED
        return result


def show_config(config: PlexUpdaterConfig) -> Dict[str, Any]:
    """Log the effective configuration."""
    log_message("Current Plex module configuration:")
    for key, value in config.to_dict().items():
        log_message(f"  {key}: {value}")
    return {"success": True, "config": config.to_dict()}


def main(args: Optional[List[str]] = None, config: Optional[PlexUpdaterConfig] = None) -> Dict[str, Any]:
    """
    Main entry point for the Plex update module.
    Args:
        args: List of arguments (supports '--check', '--download-only', '--config')
        config: Prebuilt configuration; loaded from index.json and the environment if omitted
    Returns:
        dict: Status and results of the update
    Raises:
        UpdaterError: If any step of the run fails
    """
    if args is None:
        args = []
    if config is None:
        config = load_config()

    if "--config" in args:
        return show_config(config)

    config.validate()

    log_message("Synology Plex Updater - PlexMediaServer for NAS (DSM7)")
    orchestrator = PlexUpdateOrchestrator(config)
    result = orchestrator.run(check_only="--check" in args,
                              download_only="--download-only" in args)
    return result.to_dict()
