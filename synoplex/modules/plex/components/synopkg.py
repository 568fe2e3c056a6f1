"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

Package Manager Component

Drives the DSM synopkg command line for the Plex package:
- Installed version query
- Stop, install from a local package file, start
Every call blocks until synopkg exits; a non-zero exit raises.
"""

import subprocess
from pathlib import Path
from typing import List, Type, Union

from ....errors import InstallError, PackageCommandError, StartError, StopError, VersionQueryError
from ....utils.index import log_message


def first_line(output: str) -> str:
    """Return the first line of command output, stripped."""
    return output.split("\n", 1)[0].strip() if output else ""


class SynoPackageManager:
    """Thin wrapper around synopkg for a single package."""

    def __init__(self, package_name: str, synopkg_bin: str = "/usr/syno/bin/synopkg",
                 timeout: float = 120, install_timeout: float = 900):
        self.package_name = package_name
        self.synopkg_bin = synopkg_bin
        self.timeout = timeout
        self.install_timeout = install_timeout

    def _run(self, args: List[str], error_cls: Type[PackageCommandError], timeout: float) -> str:
        """
        Run synopkg and return its stdout.

        Raises:
            error_cls: If synopkg cannot be run, times out or exits non-zero
        """
        cmd = [self.synopkg_bin] + args
        log_message(f"[SYNOPKG] Running: {' '.join(cmd)}", "DEBUG")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise error_cls(f"{' '.join(cmd)} timed out after {timeout}s") from e
        except OSError as e:
            raise error_cls(f"cannot run {self.synopkg_bin}: {e}") from e

        if result.returncode != 0:
            detail = first_line(result.stderr) or first_line(result.stdout)
            raise error_cls(
                f"{' '.join(cmd)} exited with status {result.returncode}: {detail}",
                returncode=result.returncode
            )
        return result.stdout

    def version(self) -> str:
        """
        Get the installed package version.

        Returns:
            str: Version label such as "1.32.7.7621-871adbd44"
        """
        output = self._run(["version", self.package_name], VersionQueryError, self.timeout)
        installed = first_line(output)
        if not installed:
            raise VersionQueryError(f"synopkg returned no version for {self.package_name}")
        return installed

    def stop(self) -> str:
        log_message(f"[SYNOPKG] Stopping {self.package_name} service")
        output = first_line(self._run(["stop", self.package_name], StopError, self.timeout))
        log_message(f"[SYNOPKG] {output}")
        return output

    def install(self, package_path: Union[str, Path]) -> str:
        log_message(f"[SYNOPKG] Updating {self.package_name} package from {package_path}")
        output = first_line(self._run(["install", str(package_path)], InstallError, self.install_timeout))
        log_message(f"[SYNOPKG] {output}")
        return output

    def start(self) -> str:
        log_message(f"[SYNOPKG] Starting {self.package_name} service")
        output = first_line(self._run(["start", self.package_name], StartError, self.timeout))
        log_message(f"[SYNOPKG] {output}")
        return output

    def apply(self, package_path: Union[str, Path]) -> None:
        """
        Swap the installed package for the one at package_path.

        Runs stop, install and start in order and stops at the first failure.
        Nothing is rolled back: a failed install leaves the service stopped.

        Raises:
            StopError, InstallError, StartError
        """
        self.stop()
        self.install(package_path)
        self.start()
        log_message(f"[SYNOPKG] ✓ {self.package_name} package updated successfully")
