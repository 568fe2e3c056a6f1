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
Utilities shared by the update orchestrator and its modules.
"""

from .index import (
    log_message,
    load_json_file,
    compute_file_checksum,
    checksums_match,
    CHECKSUM_ALGORITHM
)
from .versions import VersionTag, normalize, compare, compare_versions

__all__ = [
    'log_message',
    'load_json_file',
    'compute_file_checksum',
    'checksums_match',
    'CHECKSUM_ALGORITHM',
    'VersionTag',
    'normalize',
    'compare',
    'compare_versions'
]
