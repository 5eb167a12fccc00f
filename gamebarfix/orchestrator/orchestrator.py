# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/orchestrator/orchestrator.py

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..cli.args.helpers import _resolve_backup_path, _resolve_backup_root
from ..core import elevation
from ..core.exceptions import Fatal, IdentityError
from ..core.logger import Log
from ..modes.list_mode import ListMode
from ..modes.status_mode import StatusMode
from ..registry.backend import RegistryBackend, WinRegBackend
from ..registry.backup_store import BackupStore, Clock
from ..registry.paths import validate_sid
from ..registry.state_manager import StateManager

# Modes that only read; they never need an admin token.
_READ_ONLY_MODES = ("list", "status")


class Orchestrator:
    """
    Dispatches one mode:
      - list    : backup folders under the backup root
      - status  : current state of the five categories
      - apply   : backup + patch
      - restore : re-import a backup + remove what apply created

    Mutating modes relaunch through UAC unless already elevated, --no-elevate
    or --dry-run; `relaunched` is True when this process only started the
    elevated child.
    """

    def __init__(
        self,
        logger: logging.Logger,
        args: argparse.Namespace,
        *,
        conf: Optional[Dict[str, Any]] = None,
        backend: Optional[RegistryBackend] = None,
        store: Optional[BackupStore] = None,
        clock: Optional[Clock] = None,
        argv: Optional[Sequence[str]] = None,
    ):
        self.logger = logger
        self.args = args
        self.conf = conf or {}
        self._backend = backend
        self.store = store or BackupStore(logger, _resolve_backup_root(args, self.conf), clock=clock)
        self.argv: List[str] = list(sys.argv[1:] if argv is None else argv)
        self.relaunched = False

        Log.trace(
            self.logger,
            "🧠 Orchestrator init: mode=%r backup_root=%s",
            getattr(args, "mode", None),
            self.store.root,
        )

    @property
    def backend(self) -> RegistryBackend:
        if self._backend is None:
            self._backend = WinRegBackend(self.logger)
        return self._backend

    def _resolve_sid(self) -> str:
        sid = getattr(self.args, "sid", None)
        if sid:
            return validate_sid(sid)
        if getattr(self.args, "elevated", False):
            # The elevated token may belong to another account; never guess.
            raise IdentityError(msg="Elevated run started without --sid; cannot tell whose hive to patch")
        return validate_sid(elevation.current_user_sid(self.logger))

    def _needs_elevation(self, mode: str) -> bool:
        if mode in _READ_ONLY_MODES:
            return False
        if getattr(self.args, "dry_run", False):
            return False
        if getattr(self.args, "no_elevate", False) or getattr(self.args, "elevated", False):
            return False
        return not elevation.is_admin()

    def _relaunch(self, sid: str) -> int:
        ok = elevation.relaunch_elevated(self.logger, self.argv, sid, self.store.root)
        if not ok:
            raise Fatal(5, "Administrator rights are required (UAC prompt was declined)")
        self.relaunched = True
        self.logger.info("Continuing in the elevated window.")
        return 0

    def _manager(self) -> StateManager:
        return StateManager(
            self.logger,
            self.backend,
            self.store,
            handler_exe=getattr(self.args, "handler_exe", None),
        )

    def run(self) -> int:
        mode = getattr(self.args, "mode", "apply") or "apply"
        dry_run = bool(getattr(self.args, "dry_run", False))
        Log.step(self.logger, f"Mode: {mode}", dry_run=dry_run)

        if mode == "list":
            return ListMode(self.logger, self.store).run()

        sid = self._resolve_sid()
        self.logger.info("🎯 Target user SID: %s", sid)

        if self._needs_elevation(mode):
            return self._relaunch(sid)

        if mode == "status":
            return StatusMode(self.logger, self._manager()).run(sid)

        backup_path: Optional[Path] = _resolve_backup_path(self.args, self.conf)
        if mode == "apply":
            folder = self._manager().apply(sid, dry_run=dry_run, backup_dir=backup_path)
            self.logger.info("📦 Backup folder: %s", folder)
        elif mode == "restore":
            folder = self._manager().restore(sid, dry_run=dry_run, backup_dir=backup_path)
            self.logger.info("📦 Restored from: %s", folder)
        else:
            raise Fatal(2, f"Unknown mode: {mode!r}")

        self.logger.info("Done")
        return 0
