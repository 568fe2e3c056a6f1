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
Exception hierarchy for the Plex update run.

Every failure in the update workflow is fatal. Components raise one of the
classes below and the orchestrator entry point is the only place that turns
them into a log line and a process exit code. The ``stage`` attribute names
the step that failed so the final log line reads "<stage> failed: <cause>".
"""


class UpdaterError(Exception):
    """Base class for all update run failures."""
    stage = "update"


class ConfigError(UpdaterError):
    """Invalid or unusable runtime configuration."""
    stage = "config"


class FetchError(UpdaterError):
    """The release manifest could not be retrieved."""
    stage = "catalog fetch"


class DecodeError(UpdaterError):
    """The release manifest body is not the expected JSON shape."""
    stage = "catalog decode"


class VersionParseError(UpdaterError):
    """A version string could not be parsed for comparison."""
    stage = "version compare"


class ReleaseNotFoundError(UpdaterError):
    """No release in the manifest matches the configured build type."""
    stage = "release lookup"


class DigestError(UpdaterError):
    """A local file could not be read while computing its checksum."""
    stage = "checksum"


class DownloadError(UpdaterError):
    """The release artifact could not be downloaded."""
    stage = "download"


class ChecksumMismatchError(UpdaterError):
    """A freshly downloaded artifact does not match the expected checksum."""
    stage = "download verify"

    def __init__(self, path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"checksum mismatch for {path}: expected {expected}, got {actual}")


class PackageCommandError(UpdaterError):
    """A synopkg invocation failed or exited non-zero."""
    stage = "package manager"

    def __init__(self, message: str, returncode=None):
        self.returncode = returncode
        super().__init__(message)


class VersionQueryError(PackageCommandError):
    stage = "installed version query"


class StopError(PackageCommandError):
    stage = "package stop"


class InstallError(PackageCommandError):
    stage = "package install"


class StartError(PackageCommandError):
    stage = "package start"


class NotifyError(UpdaterError):
    """The notification center command failed."""
    stage = "notification"
