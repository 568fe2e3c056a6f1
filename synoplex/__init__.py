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
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

__version__ = "1.0.0"

# Re-export utilities for easy access by modules and callers
from .utils.index import log_message, compute_file_checksum
from .utils.versions import compare_versions, normalize
from .errors import UpdaterError

__all__ = [
    'log_message',
    'compute_file_checksum',
    'compare_versions',
    'normalize',
    'UpdaterError'
]
