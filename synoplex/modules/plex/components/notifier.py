"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

Notification Component

Sends messages to the DSM Notification Center through synonotify. The
message is handed over as a one-entry JSON object keyed by the upper-cased
template placeholder, e.g. {"%PKG_HAS_UPDATE%": "..."}.
"""

import json
import subprocess

from ....errors import NotifyError
from ....utils.index import log_message


def build_payload(template: str, message: str) -> str:
    """Serialize the synonotify placeholder mapping for a template."""
    return json.dumps({f"%{template.upper()}%": message})


class SynoNotifier:
    """Posts notifications to the DSM Notification Center."""

    def __init__(self, synonotify_bin: str = "/usr/syno/synobin/synonotify", timeout: float = 30):
        self.synonotify_bin = synonotify_bin
        self.timeout = timeout

    def notify(self, tag: str, template: str, message: str) -> str:
        """
        Send one notification.

        Args:
            tag: Notification tag, e.g. "PKGHasUpgrade"
            template: Template key whose placeholder receives the message
            message: Text shown to the operator

        Returns:
            str: First line of synonotify output

        Raises:
            NotifyError: If synonotify cannot be run or exits non-zero
        """
        payload = build_payload(template, message)
        cmd = [self.synonotify_bin, tag, payload]
        log_message(f"[NOTIFY] Sending notification: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise NotifyError(f"{self.synonotify_bin} timed out after {self.timeout}s") from e
        except OSError as e:
            raise NotifyError(f"cannot run {self.synonotify_bin}: {e}") from e

        if result.returncode != 0:
            raise NotifyError(f"{self.synonotify_bin} exited with status {result.returncode}: "
                              f"{result.stderr.strip()}")

        output = result.stdout.split("\n", 1)[0].strip()
        log_message(f"[NOTIFY] Notification sent: {output}")
        return output
