# SPDX-License-Identifier: LGPL-3.0-or-later
# gamebarfix/modes/status_mode.py
from __future__ import annotations

import logging
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from ..registry.state_manager import CategoryStatus, StateManager


class StatusMode:
    """status mode: read-only view of the five categories for one SID."""

    def __init__(self, logger: logging.Logger, manager: StateManager, console: Optional[Console] = None):
        self.logger = logger
        self.manager = manager
        self.console = console or Console()

    @staticmethod
    def build_table(sid: str, rows: List[CategoryStatus]) -> Table:
        table = Table(title=f"Registry state for {sid}")
        table.add_column("Category", style="bold")
        table.add_column("Key", overflow="fold")
        table.add_column("Exists")
        table.add_column("Patched")
        table.add_column("Differs")

        for r in rows:
            table.add_row(
                r.category.name,
                r.path,
                "yes" if r.exists else "no",
                "[green]yes[/green]" if r.patched else "[red]no[/red]",
                ", ".join(r.mismatched) or "-",
            )
        return table

    def run(self, sid: str) -> int:
        rows = self.manager.status(sid)
        self.console.print(self.build_table(sid, rows))
        patched = sum(1 for r in rows if r.patched)
        self.logger.info("%d/%d categories patched", patched, len(rows))
        return 0
