"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

Components of the Plex update module, one per external collaborator.
"""

from .catalog import ReleaseCatalog, ReleaseCatalogClient, ReleaseEntry, select_release
from .fetcher import ReleaseFetcher, artifact_file_name
from .notifier import SynoNotifier, build_payload
from .synopkg import SynoPackageManager

__all__ = [
    'ReleaseCatalog',
    'ReleaseCatalogClient',
    'ReleaseEntry',
    'select_release',
    'ReleaseFetcher',
    'artifact_file_name',
    'SynoNotifier',
    'build_payload',
    'SynoPackageManager'
]
