# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/__init__.py
"""
gamebarfix - silence the "You'll need a new app to open this ms-gamingoverlay
link" popup on Windows by patching the current user's registry hive, with a
timestamped backup of everything it touches.

Usage as a library:

    from gamebarfix import BackupStore, StateManager, WinRegBackend

    store = BackupStore(logger, Path(r"C:\\backups"))
    manager = StateManager(logger, WinRegBackend(logger), store)
    folder = manager.apply("S-1-5-21-...")
    manager.restore("S-1-5-21-...", backup_dir=folder)
"""

__version__ = "0.1.0"

from .registry import BackupStore, StateManager, WinRegBackend

__all__ = ["__version__", "BackupStore", "StateManager", "WinRegBackend"]
