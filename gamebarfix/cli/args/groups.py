# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/cli/args/groups.py
from __future__ import annotations

import argparse

MODES = ("apply", "restore", "list", "status")


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged normalized config and exit.")
    p.add_argument("--dump-args", action="store_true", help="Print final parsed args and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -v, -vv, -vvv")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Less output: -q (warnings), -qq (errors).")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write a full transcript to this file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit NDJSON log lines.")


def _add_operation(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # What to do
    # ------------------------------------------------------------------
    p.add_argument("--mode", dest="mode", default="apply", help=f"Operation: {' | '.join(MODES)}.")
    p.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Log every registry/filesystem change instead of making it.",
    )
    p.add_argument(
        "--no-pause",
        dest="no_pause",
        action="store_true",
        help="Exit immediately instead of waiting for Enter.",
    )


def _add_backup_paths(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Backup location
    # ------------------------------------------------------------------
    p.add_argument(
        "--backup-root",
        dest="backup_root",
        default=None,
        help="Directory holding timestamped backup folders (default: %%LOCALAPPDATA%%\\gamebarfix\\backups).",
    )
    p.add_argument(
        "--backup-path",
        dest="backup_path",
        default=None,
        help="Exact backup folder: apply writes into it, restore reads from it (default: newest).",
    )


def _add_target(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Target user / handler
    # ------------------------------------------------------------------
    p.add_argument(
        "--sid",
        dest="sid",
        default=None,
        help="SID of the user whose HKEY_USERS hive is patched (default: current user).",
    )
    p.add_argument(
        "--handler-exe",
        dest="handler_exe",
        default=None,
        help="Program registered for the ms-gaming protocols (default: %%SystemRoot%%\\System32\\systray.exe).",
    )


def _add_elevation(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # UAC
    # ------------------------------------------------------------------
    p.add_argument(
        "--no-elevate",
        dest="no_elevate",
        action="store_true",
        help="Never relaunch through UAC; run with the current token.",
    )
    # Set on the relaunched child only.
    p.add_argument("--elevated", dest="elevated", action="store_true", help=argparse.SUPPRESS)
