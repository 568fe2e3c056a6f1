"""
HOMESERVER Synology Plex Updater
Copyright (C) 2024 HOMESERVER LLC

Update modules run by the orchestrator.
"""
