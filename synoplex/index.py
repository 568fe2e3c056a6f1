#!/usr/bin/env python3
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

import argparse
import logging
import os
import sys
import traceback

from .errors import UpdaterError
from .utils.index import log_message
from .modules.plex import main as run_plex_module
from .modules.plex.config import KNOWN_BUILD_TYPES, load_config


def setup_update_logging(debug: bool = False):
    """
    Log to stdout only; the scheduler owns file redirection.
    """
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    unified_format = logging.Formatter('[%(asctime)s] [%(levelname)s] %(message)s',
                                       datefmt='%Y-%m-%d %H:%M:%S')
    console_handler.setFormatter(unified_format)
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
    root_logger.addHandler(console_handler)
    logging.info("="*80)
    logging.info("PLEX UPDATE SESSION STARTED")
    logging.info(f"Command: {' '.join(sys.argv)}")
    logging.info(f"Working Directory: {os.getcwd()}")
    logging.info("="*80)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Synology Plex Media Server Updater")
    parser.add_argument("--build-type", default=None,
                        help=f"Release build to install ({', '.join(KNOWN_BUILD_TYPES)}); "
                             "default: BUILD_TYPE or index.json")
    parser.add_argument("--work-dir", default=None,
                        help="Directory for downloaded packages (default: current directory)")
    parser.add_argument("--manifest-url", default=None,
                        help="Plex downloads manifest URL")
    parser.add_argument("--synopkg", default=None,
                        help="Path to the synopkg binary")
    parser.add_argument("--synonotify", default=None,
                        help="Path to the synonotify binary")
    parser.add_argument("--strict-notify", action="store_true", default=None,
                        help="Treat notification failures as fatal")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--check", action="store_true",
                      help="Only check for a new version, don't download or install")
    mode.add_argument("--download-only", action="store_true",
                      help="Download and verify the new package without installing it")
    mode.add_argument("--config", action="store_true",
                      help="Show the effective configuration and exit")

    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    """
    Main entry point for the Plex update run.

    Returns 0 on success, including when Plex is already up to date. Any
    UpdaterError is logged with the failing stage and returns 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    module_args = []
    if args.check:
        module_args.append("--check")
    if args.download_only:
        module_args.append("--download-only")
    if args.config:
        module_args.append("--config")

    try:
        setup_update_logging(args.debug)

        config = load_config(overrides={
            "build_type": args.build_type,
            "work_dir": args.work_dir,
            "manifest_url": args.manifest_url,
            "synopkg_bin": args.synopkg,
            "synonotify_bin": args.synonotify,
            "notify_failures_fatal": args.strict_notify
        })

        result = run_plex_module(module_args, config=config)

        if result.get("updated"):
            log_message(f"Plex updated: {result['old_version']} → {result['new_version']}")
        elif result.get("update_available"):
            log_message(f"Update available: {result['old_version']} → {result['latest_version']}")
        log_message("Plex update run completed successfully")
        return 0

    except UpdaterError as e:
        log_message(f"{e.stage} failed: {e}", "ERROR")
        return 1
    except KeyboardInterrupt:
        log_message("Update process interrupted by user", "WARNING")
        return 130
    except Exception as e:
        log_message(f"Unhandled error in update process: {e}", "ERROR")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
