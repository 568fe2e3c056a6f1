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
Configuration for the Plex update module.

Built once at startup from the module's index.json, then environment
variables, then command line overrides, and passed to every component.
"""

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ...errors import ConfigError
from ...utils.index import load_json_file, log_message

MODULE_INDEX = Path(__file__).parent / "index.json"

KNOWN_BUILD_TYPES = (
    "linux-x86",
    "linux-x86_64",
    "linux-armv7hf_neon",
    "linux-aarch64",
    "linux-ppc64le",
)

# Environment variable -> config field
ENV_OVERRIDES = {
    "BUILD_TYPE": "build_type",
    "SYNOPLEX_WORK_DIR": "work_dir",
    "SYNOPLEX_MANIFEST_URL": "manifest_url",
    "SYNOPLEX_SYNOPKG": "synopkg_bin",
    "SYNOPLEX_SYNONOTIFY": "synonotify_bin",
}


@dataclass
class PlexUpdaterConfig:
    """Effective settings for a single update run."""
    package_name: str = "PlexMediaServer"
    build_type: str = "linux-x86_64"
    work_dir: str = "."
    synopkg_bin: str = "/usr/syno/bin/synopkg"
    synonotify_bin: str = "/usr/syno/synobin/synonotify"
    manifest_url: str = "https://plex.tv/api/downloads/5.json"
    manifest_platform: str = "Synology (DSM 7)"
    notification_tag: str = "PKGHasUpgrade"
    notification_template: str = "pkg_has_update"
    notify_failures_fatal: bool = False
    request_timeout: float = 30
    download_timeout: float = 300
    command_timeout: float = 120
    install_timeout: float = 900

    @property
    def work_path(self) -> Path:
        return Path(self.work_dir)

    def validate(self) -> None:
        """
        Check the settings a run cannot proceed without.

        Raises:
            ConfigError: If the working directory is missing or a required value is empty
        """
        if not self.work_path.is_dir():
            raise ConfigError(f"working directory does not exist: {self.work_dir}")
        for name in ("package_name", "build_type", "manifest_url", "synopkg_bin", "synonotify_bin"):
            if not getattr(self, name):
                raise ConfigError(f"{name} must not be empty")
        if self.build_type not in KNOWN_BUILD_TYPES:
            log_message(f"Unrecognized build type '{self.build_type}', expected one of: "
                        f"{', '.join(KNOWN_BUILD_TYPES)}", "WARNING")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _from_module_index(index_data: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten the nested index.json config section into dataclass fields."""
    config = index_data.get("config", {})
    package = config.get("package", {})
    manifest = config.get("manifest", {})
    directories = config.get("directories", {})
    binaries = config.get("binaries", {})
    notifications = config.get("notifications", {})
    timeouts = config.get("timeouts", {})

    values = {
        "package_name": package.get("name"),
        "build_type": package.get("build_type"),
        "manifest_url": manifest.get("url"),
        "manifest_platform": manifest.get("platform"),
        "work_dir": directories.get("work_dir"),
        "synopkg_bin": binaries.get("synopkg"),
        "synonotify_bin": binaries.get("synonotify"),
        "notification_tag": notifications.get("tag"),
        "notification_template": notifications.get("template"),
        "notify_failures_fatal": notifications.get("failures_fatal"),
        "request_timeout": timeouts.get("request"),
        "download_timeout": timeouts.get("download"),
        "command_timeout": timeouts.get("command"),
        "install_timeout": timeouts.get("install"),
    }
    return {k: v for k, v in values.items() if v is not None}


def load_config(index_path: Optional[Path] = None,
                environ: Optional[Mapping[str, str]] = None,
                overrides: Optional[Dict[str, Any]] = None) -> PlexUpdaterConfig:
    """
    Build the run configuration.

    Args:
        index_path: Module index.json to read (defaults to the bundled one)
        environ: Environment mapping (defaults to os.environ)
        overrides: Values from the command line; None entries are ignored

    Returns:
        PlexUpdaterConfig: Effective configuration
    """
    if environ is None:
        environ = os.environ

    values: Dict[str, Any] = {}

    index_data = load_json_file(index_path or MODULE_INDEX)
    if index_data is None:
        log_message("Failed to load module config, using defaults", "WARNING")
    else:
        values.update(_from_module_index(index_data))

    for env_name, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            log_message(f"Using {env_name}={value} from environment", "DEBUG")
            values[field_name] = value

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(PlexUpdaterConfig)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"unknown configuration keys: {', '.join(sorted(unknown))}")

    return PlexUpdaterConfig(**values)
