# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/registry/__init__.py
"""
Registry layer: the managed locations, the .reg fragment codec, live access
and the backup/apply/restore state machine.
"""

from .backend import RegExe, RegistryBackend, WinRegBackend
from .backup_store import BackupInfo, BackupStore, Manifest
from .paths import CATEGORIES, Category, Entry, RegValue, desired_entries, validate_sid
from .state_manager import CategoryStatus, StateManager

__all__ = [
    "RegistryBackend",
    "WinRegBackend",
    "RegExe",
    "BackupStore",
    "BackupInfo",
    "Manifest",
    "CATEGORIES",
    "Category",
    "Entry",
    "RegValue",
    "desired_entries",
    "validate_sid",
    "StateManager",
    "CategoryStatus",
]
