# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/cli/help_texts.py
from __future__ import annotations

# NOTE:
# Pure help text for the argparse epilog. Keep it copy/paste runnable.

YAML_EXAMPLE = r"""# gamebarfix configuration example (YAML)
#
# Run:
#   gamebarfix --config gamebarfix.yaml
#
# Merge multiple configs (later overrides earlier):
#   gamebarfix --config base.yaml --config overrides.yaml
#
# CLI flags always win over config values (2-phase parse):
#   Phase 0: reads only --config / logging flags
#   Phase 1: loads+merges YAML/JSON and applies it as argparse defaults
#   Phase 2: parses the full command line
#
# --------------------------------------------------------------------------------------
# Keys (same names as the flag dests)
# --------------------------------------------------------------------------------------
# mode: apply                 # apply | restore | list | status
# dry_run: false              # log every change instead of making it
# backup_root: C:\Users\me\AppData\Local\gamebarfix\backups
# backup_path: null           # restore from / write into this exact folder
# handler_exe: C:\Windows\System32\systray.exe
# no_pause: true              # don't wait for Enter before exiting
# no_elevate: false           # never relaunch through UAC
# verbose: 0                  # 0|1|2 or CLI: -v/-vv
# log_file: gamebarfix.log    # full transcript
# json_logs: false
#
# --------------------------------------------------------------------------------------
# Examples
# --------------------------------------------------------------------------------------
# Preview what apply would change:
#   gamebarfix --dry-run
#
# Undo the most recent apply:
#   gamebarfix --mode restore
#
# Undo a specific run:
#   gamebarfix --mode restore --backup-path %LOCALAPPDATA%\gamebarfix\backups\gamebarfix-20240101-120000
#
# Show backups / current state:
#   gamebarfix --mode list
#   gamebarfix --mode status
"""

FEATURE_SUMMARY = """ • Apply: GameDVR AppCaptureEnabled=0, GameConfigStore GameDVR_Enabled=0\n
 • Apply: ms-gamebar / ms-gamebarservices / ms-gamingoverlay routed to a silent handler\n
 • Backup: per-run folder with reg export fragments + prestate.json\n
 • Restore: re-import fragments, remove keys and values apply created\n
 • Safety: dry-run, idempotent writes, backups are never deleted\n
"""
