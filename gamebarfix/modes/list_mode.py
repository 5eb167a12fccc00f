# SPDX-License-Identifier: LGPL-3.0-or-later
# gamebarfix/modes/list_mode.py
from __future__ import annotations

import logging
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from ..registry.backup_store import BackupInfo, BackupStore
from ..registry.paths import CATEGORIES


class ListMode:
    """
    list mode:
      - one row per backup folder under the backup root, newest first
      - columns: folder, timestamp, SID, fragment count, categories that pre-existed
    """

    def __init__(self, logger: logging.Logger, store: BackupStore, console: Optional[Console] = None):
        self.logger = logger
        self.store = store
        self.console = console or Console()

    def build_table(self, backups: List[BackupInfo]) -> Table:
        table = Table(title=f"Backups in {self.store.root}", show_lines=False)
        table.add_column("Folder", style="bold")
        table.add_column("Timestamp")
        table.add_column("SID", overflow="fold")
        table.add_column("Fragments", justify="right")
        table.add_column("Existed before apply")

        for b in backups:
            m = b.manifest
            if m is None:
                table.add_row(b.name, "-", "-", str(len(b.fragments)), "[yellow]no manifest[/yellow]")
                continue
            existed = [cat.name for cat in CATEGORIES if m.did_exist(cat.name)]
            table.add_row(b.name, m.timestamp or "-", m.sid or "-", str(len(b.fragments)), ", ".join(existed) or "(none)")
        return table

    def run(self) -> int:
        backups = self.store.list()
        if not backups:
            self.logger.info("No backups under %s", self.store.root)
            return 0
        self.console.print(self.build_table(backups))
        self.logger.debug("Listed %d backup(s)", len(backups))
        return 0
