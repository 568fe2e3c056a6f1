"""
Tests for the synopkg and synonotify components.

Tests cover:
- SynoPackageManager.version() - installed version query
- SynoPackageManager.apply() - stop/install/start sequencing and fail-fast
- SynoNotifier.notify() - payload format and error mapping
"""

import json
import subprocess
from unittest.mock import call, patch

import pytest

from conftest import completed
from synoplex.errors import InstallError, NotifyError, StartError, StopError, VersionQueryError
from synoplex.modules.plex.components.notifier import SynoNotifier, build_payload
from synoplex.modules.plex.components.synopkg import SynoPackageManager, first_line

SUBPROCESS_RUN = "subprocess.run"


@pytest.fixture
def pkg():
    return SynoPackageManager("PlexMediaServer", "/bin/synopkg", timeout=10, install_timeout=60)


# ═══════════════════════════════════════════════════════════════════════════════
# Test SynoPackageManager
# ═══════════════════════════════════════════════════════════════════════════════


class TestVersion:
    """Tests for the installed version query."""

    def test_first_line_of_output(self, pkg):
        with patch(SUBPROCESS_RUN, return_value=completed(stdout="1.32.7.7621-871adbd44\nextra\n")) as run:
            assert pkg.version() == "1.32.7.7621-871adbd44"
        run.assert_called_once_with(["/bin/synopkg", "version", "PlexMediaServer"],
                                    capture_output=True, text=True, timeout=10)

    def test_non_zero_exit(self, pkg):
        with patch(SUBPROCESS_RUN, return_value=completed(returncode=1, stderr="package not installed")):
            with pytest.raises(VersionQueryError, match="package not installed"):
                pkg.version()

    def test_empty_output(self, pkg):
        with patch(SUBPROCESS_RUN, return_value=completed(stdout="\n")):
            with pytest.raises(VersionQueryError):
                pkg.version()

    def test_missing_binary(self, pkg):
        with patch(SUBPROCESS_RUN, side_effect=FileNotFoundError("/bin/synopkg")):
            with pytest.raises(VersionQueryError):
                pkg.version()

    def test_first_line_helper(self):
        assert first_line("") == ""
        assert first_line("  ok \nmore") == "ok"


class TestApply:
    """Tests for the stop → install → start transition."""

    def test_runs_in_order(self, pkg):
        with patch(SUBPROCESS_RUN, return_value=completed(stdout="done\n")) as run:
            pkg.apply("/volume1/plex/PlexMediaServer.spk")

        assert run.call_args_list == [
            call(["/bin/synopkg", "stop", "PlexMediaServer"], capture_output=True, text=True, timeout=10),
            call(["/bin/synopkg", "install", "/volume1/plex/PlexMediaServer.spk"],
                 capture_output=True, text=True, timeout=60),
            call(["/bin/synopkg", "start", "PlexMediaServer"], capture_output=True, text=True, timeout=10),
        ]

    def test_stop_failure_aborts(self, pkg):
        with patch(SUBPROCESS_RUN, return_value=completed(returncode=1)) as run:
            with pytest.raises(StopError):
                pkg.apply("/tmp/p.spk")
        assert run.call_count == 1

    def test_install_failure_does_not_restart(self, pkg):
        """No rollback: the service is left stopped."""
        results = [completed(stdout="stopped"), completed(returncode=255, stdout="install failed")]
        with patch(SUBPROCESS_RUN, side_effect=results) as run:
            with pytest.raises(InstallError) as exc_info:
                pkg.apply("/tmp/p.spk")
        assert run.call_count == 2
        assert exc_info.value.returncode == 255
        assert "install failed" in str(exc_info.value)

    def test_start_failure(self, pkg):
        results = [completed(), completed(), completed(returncode=1, stderr="failed to start")]
        with patch(SUBPROCESS_RUN, side_effect=results):
            with pytest.raises(StartError, match="failed to start"):
                pkg.apply("/tmp/p.spk")

    def test_install_timeout(self, pkg):
        results = [completed(), subprocess.TimeoutExpired(cmd="synopkg", timeout=60)]
        with patch(SUBPROCESS_RUN, side_effect=results):
            with pytest.raises(InstallError, match="timed out"):
                pkg.apply("/tmp/p.spk")


# ═══════════════════════════════════════════════════════════════════════════════
# Test SynoNotifier
# ═══════════════════════════════════════════════════════════════════════════════


class TestNotifier:
    """Tests for DSM notification sending."""

    def test_payload_key_is_upper_percent_delimited(self):
        assert json.loads(build_payload("pkg_has_update", "hi")) == {"%PKG_HAS_UPDATE%": "hi"}

    def test_notify_command(self):
        notifier = SynoNotifier("/bin/synonotify", timeout=5)
        with patch(SUBPROCESS_RUN, return_value=completed(stdout="sent\n")) as run:
            assert notifier.notify("PKGHasUpgrade", "pkg_has_update", "new version") == "sent"

        args = run.call_args[0][0]
        assert args[:2] == ["/bin/synonotify", "PKGHasUpgrade"]
        assert json.loads(args[2]) == {"%PKG_HAS_UPDATE%": "new version"}

    def test_non_zero_exit(self):
        with patch(SUBPROCESS_RUN, return_value=completed(returncode=1, stderr="bad tag")):
            with pytest.raises(NotifyError, match="bad tag"):
                SynoNotifier("/bin/synonotify").notify("Bogus", "x", "y")

    def test_missing_binary(self):
        with patch(SUBPROCESS_RUN, side_effect=FileNotFoundError("/bin/synonotify")):
            with pytest.raises(NotifyError):
                SynoNotifier("/bin/synonotify").notify("PKGHasUpgrade", "pkg_has_update", "y")
