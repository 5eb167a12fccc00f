# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/registry/state_manager.py
"""
Backup / apply / restore over the five managed registry categories.

apply():
  1) pick a backup folder
  2) record which categories exist (prestate.json)
  3) export every existing category to a .reg fragment
  4) force the two GameDVR flags to 0
  5) register the three ms-gaming protocols to a harmless handler

restore():
  1) resolve the backup folder (explicit or newest)
  2) re-import every fragment present, then drop values apply added
  3) delete categories the manifest says did not exist before apply

Every write is skipped when the live value already matches, so both
operations can be repeated safely. In dry-run mode every mutation becomes
a log line.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ..core.exceptions import Fatal, RegFileError
from ..core.logger import Log
from ..core.logging_utils import log_step
from ..core.utils import U
from .backend import RegistryBackend
from .backup_store import BackupStore, Manifest
from .paths import CATEGORIES, Category, desired_entries, validate_sid
from .regfile import RegDocument, load_reg_file


@dataclass
class CategoryStatus:
    category: Category
    path: str
    exists: bool
    patched: bool
    mismatched: List[str]


class StateManager:
    def __init__(
        self,
        logger: logging.Logger,
        backend: RegistryBackend,
        store: BackupStore,
        *,
        handler_exe: Optional[str] = None,
    ):
        self.logger = logger
        self.backend = backend
        self.store = store
        self.handler_exe = handler_exe

    # ------------------------------------------------------------------
    # apply
    # ------------------------------------------------------------------

    def apply(self, sid: str, *, dry_run: bool = False, backup_dir: Optional[Path] = None) -> Path:
        sid = validate_sid(sid)
        log = Log.bind(self.logger, sid=sid)
        Log.banner(self.logger, "Apply" + (" (dry-run)" if dry_run else ""))

        now = self.store.clock()
        folder = self._apply_folder(backup_dir, now=now, dry_run=dry_run)

        existed = {cat.name: self.backend.key_exists(cat.key_path(sid)) for cat in CATEGORIES}
        for cat in CATEGORIES:
            log.info("%-20s %s", cat.name, "present" if existed[cat.name] else "absent")

        manifest = Manifest(timestamp=now.isoformat(timespec="seconds"), sid=sid, existed=existed)
        self.store.write_manifest(folder, manifest, dry_run=dry_run)

        with log_step(self.logger, "Exporting pre-state fragments"):
            exported = self._export_fragments(sid, folder, existed, dry_run=dry_run)

        with log_step(self.logger, "Writing protocol-handler suppression"):
            written, unchanged = self._write_desired(sid, dry_run=dry_run)

        Log.ok(
            self.logger,
            "Apply finished",
            backup=str(folder),
            exported=exported,
            written=written,
            unchanged=unchanged,
            dry_run=dry_run,
        )
        return folder

    def _apply_folder(self, backup_dir: Optional[Path], *, now, dry_run: bool) -> Path:
        if backup_dir is None:
            return self.store.new_folder(now=now, dry_run=dry_run)

        folder = Path(backup_dir).expanduser()
        if self.store.has_manifest(folder):
            # Re-using it would overwrite the only record of the original state.
            raise Fatal(2, f"Backup folder already holds a manifest: {folder}")
        if dry_run:
            Log.dry(self.logger, "Would create backup folder %s", folder)
        else:
            U.ensure_dir(folder)
            self.logger.info("📁 Backup folder: %s", folder)
        return folder

    def _export_fragments(self, sid: str, folder: Path, existed: Dict[str, bool], *, dry_run: bool) -> int:
        exported = 0
        for cat in CATEGORIES:
            path = cat.key_path(sid)
            dest = folder / cat.fragment
            if not existed[cat.name]:
                self.logger.debug("%s not present; no export", cat.name)
                continue
            if dry_run:
                Log.dry(self.logger, "Would export %s -> %s", path, dest)
                continue
            if self.backend.export_key(path, dest):
                exported += 1
                self.logger.info("💾 Exported %s -> %s", cat.name, dest.name)
                continue
            # A half-written fragment would be imported on restore; drop it.
            if dest.exists():
                dest.unlink()
            Log.warn(self.logger, "Export failed; recorded as no export", category=cat.name)
        return exported

    def _write_desired(self, sid: str, *, dry_run: bool) -> "tuple[int, int]":
        written = unchanged = 0
        for cat in CATEGORIES:
            for entry in desired_entries(cat, self.handler_exe):
                path = cat.entry_path(sid, entry)
                current = self.backend.get_value(path, entry.name)
                if current == entry.value:
                    self.logger.debug("Already set: %s\\%s", cat.name, entry.label)
                    unchanged += 1
                    continue
                if dry_run:
                    Log.dry(self.logger, "Would set %s [%s] = %s", path, entry.name or "(default)", entry.value.describe())
                    continue
                self.backend.set_value(path, entry.name, entry.value)
                written += 1
                self.logger.info(
                    "✍️  Set %s [%s] = %s (was %s)",
                    path,
                    entry.name or "(default)",
                    entry.value.describe(),
                    current.describe() if current is not None else "unset",
                )
        return written, unchanged

    # ------------------------------------------------------------------
    # restore
    # ------------------------------------------------------------------

    def restore(self, sid: str, *, dry_run: bool = False, backup_dir: Optional[Path] = None) -> Path:
        sid = validate_sid(sid)
        Log.banner(self.logger, "Restore" + (" (dry-run)" if dry_run else ""))

        folder = self.store.resolve(backup_dir)
        manifest = self.store.read_manifest(folder)

        backup_sid = sid
        if manifest is not None and manifest.sid:
            backup_sid = manifest.sid
            if backup_sid.lower() != sid.lower():
                Log.warn(self.logger, "Backup belongs to a different SID; restoring that user's keys", backup_sid=backup_sid, sid=sid)

        with log_step(self.logger, "Re-importing fragments"):
            for cat in CATEGORIES:
                self._restore_fragment(cat, folder, backup_sid, dry_run=dry_run)

        if manifest is None:
            Log.warn(self.logger, "No usable manifest in backup; skipping removal of created keys", folder=str(folder))
            return folder

        with log_step(self.logger, "Removing keys created by apply"):
            for cat in CATEGORIES:
                if manifest.did_exist(cat.name):
                    continue
                self._remove_created(cat.key_path(backup_sid), cat.name, dry_run=dry_run)

        Log.ok(self.logger, "Restore finished", backup=str(folder), dry_run=dry_run)
        return folder

    def _restore_fragment(self, cat: Category, folder: Path, sid: str, *, dry_run: bool) -> None:
        frag = folder / cat.fragment
        if not frag.is_file():
            self.logger.debug("No fragment for %s; skipping import", cat.name)
            return

        if dry_run:
            Log.dry(self.logger, "Would import %s", frag)
        elif self.backend.import_file(frag):
            self.logger.info("♻️  Imported %s", frag.name)
        else:
            Log.warn(self.logger, "Import failed; restore is partial", category=cat.name)
            return

        try:
            doc = load_reg_file(frag)
        except (OSError, RegFileError) as e:
            Log.warn(self.logger, "Cannot read fragment; added values left in place", category=cat.name, error=str(e))
            return
        self._prune_added(cat, doc, sid, dry_run=dry_run)

    def _prune_added(self, cat: Category, doc: RegDocument, sid: str, *, dry_run: bool) -> None:
        """
        `reg import` only merges. Drop what apply added to a key that already
        existed: subkeys absent from the fragment, then values absent from it.
        """
        base = cat.key_path(sid)
        dropped_keys: List[str] = []
        for entry in desired_entries(cat, self.handler_exe):
            path = cat.entry_path(sid, entry)

            if any(path.lower() == k.lower() or path.lower().startswith(k.lower() + "\\") for k in dropped_keys):
                continue

            missing = _first_missing_key(doc, base, entry.subkey)
            if missing is not None:
                dropped_keys.append(missing)
                self._remove_created(missing, cat.name, dry_run=dry_run)
                continue

            key = doc.find(path)
            if key is not None and key.has_value(entry.name):
                continue
            if self.backend.get_value(path, entry.name) is None:
                continue
            if dry_run:
                Log.dry(self.logger, "Would delete value %s [%s]", path, entry.name or "(default)")
            elif self.backend.delete_value(path, entry.name):
                self.logger.info("🧹 Deleted value %s [%s]", path, entry.name or "(default)")

    def _remove_created(self, path: str, label: str, *, dry_run: bool) -> None:
        if not self.backend.key_exists(path):
            self.logger.debug("%s already absent: %s", label, path)
            return
        if dry_run:
            Log.dry(self.logger, "Would delete key %s", path)
            return
        if self.backend.delete_key(path):
            self.logger.info("🗑️  Deleted %s", path)
        else:
            Log.warn(self.logger, "Delete failed", category=label, path=path)

    # ------------------------------------------------------------------
    # status
    # ------------------------------------------------------------------

    def status(self, sid: str) -> List[CategoryStatus]:
        sid = validate_sid(sid)
        out: List[CategoryStatus] = []
        for cat in CATEGORIES:
            path = cat.key_path(sid)
            mismatched = [
                e.label
                for e in desired_entries(cat, self.handler_exe)
                if self.backend.get_value(cat.entry_path(sid, e), e.name) != e.value
            ]
            out.append(
                CategoryStatus(
                    category=cat,
                    path=path,
                    exists=self.backend.key_exists(path),
                    patched=not mismatched,
                    mismatched=mismatched,
                )
            )
        return out


def _first_missing_key(doc: RegDocument, base: str, subkey: str) -> Optional[str]:
    """Shallowest key on the way to base\\subkey that the fragment doesn't contain."""
    if not subkey:
        return None
    cur = base
    for part in subkey.split("\\"):
        cur = f"{cur}\\{part}"
        if doc.find(cur) is None:
            return cur
    return None
