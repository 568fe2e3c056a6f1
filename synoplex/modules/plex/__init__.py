"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

Plex Media Server update module for Synology DSM 7.
"""

from .config import PlexUpdaterConfig, load_config, KNOWN_BUILD_TYPES
from .index import PlexUpdateOrchestrator, UpdateResult, UpdateState, main

__all__ = [
    'PlexUpdaterConfig',
    'load_config',
    'KNOWN_BUILD_TYPES',
    'PlexUpdateOrchestrator',
    'UpdateResult',
    'UpdateState',
    'main'
]
