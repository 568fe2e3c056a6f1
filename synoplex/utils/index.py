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

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import DigestError

logger = logging.getLogger("synoplex")

# Checksum field in the Plex manifest is a SHA-1 hex digest
CHECKSUM_ALGORITHM = "sha1"
CHUNK_SIZE = 65536


def log_message(message, level="INFO"):
    """
    Log a message through the shared update logger.
    Args:
        message (str): The message to log.
        level (str): Log level (e.g., 'DEBUG', 'INFO', 'WARNING', 'ERROR').
    """
    if level == "ERROR":
        logger.error(message)
    elif level == "WARNING":
        logger.warning(message)
    elif level == "DEBUG":
        logger.debug(message)
    else:
        logger.info(message)


def load_json_file(path: Union[str, Path]) -> Optional[Dict[str, Any]]:
    """
    Load a JSON configuration file such as a module's index.json.

    Args:
        path: Path to the JSON file

    Returns:
        dict: The loaded data, or None if the file is missing or invalid
    """
    path = Path(path)
    if not path.exists():
        log_message(f"Config file does not exist: {path}", "DEBUG")
        return None

    try:
        with open(path, 'r') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log_message(f"Failed to load {path}: {e}", "WARNING")
        return None


def compute_file_checksum(file_path: Union[str, Path], algorithm: str = CHECKSUM_ALGORITHM) -> str:
    """
    Stream a file through a hash and return the hex digest.

    Args:
        file_path: Path to the file to hash
        algorithm: hashlib algorithm name, SHA-1 to match the Plex manifest

    Returns:
        str: Lowercase hex digest

    Raises:
        DigestError: If the file cannot be opened or read
    """
    h = hashlib.new(algorithm)
    try:
        with open(file_path, 'rb') as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                h.update(chunk)
    except OSError as e:
        raise DigestError(f"cannot read {file_path}: {e}") from e
    return h.hexdigest()


def checksums_match(actual: str, expected: str) -> bool:
    """Compare two hex digests ignoring case and surrounding whitespace."""
    return actual.strip().lower() == expected.strip().lower()
