# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/registry/backup_store.py
"""
Backup folders: one timestamped directory per apply run, holding the exported
.reg fragments plus prestate.json (which categories existed before apply).

A manifest is written once and never rewritten; the tool never deletes
backup folders.
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import Fatal, NotFoundError
from ..core.logger import Log
from ..core.utils import U
from .paths import CATEGORIES

MANIFEST_NAME = "prestate.json"
FOLDER_PREFIX = "gamebarfix-"
MAX_SUFFIX = 99

_FOLDER_RE = re.compile(r"^gamebarfix-\d{8}-\d{6}(-\d{2})?$")

Clock = Callable[[], _dt.datetime]


@dataclass(frozen=True)
class Manifest:
    timestamp: str
    sid: str
    existed: Dict[str, bool]

    def did_exist(self, category: str) -> bool:
        # Unknown categories count as pre-existing so restore never prunes them.
        return bool(self.existed.get(category, True))

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"timestamp": self.timestamp, "sid": self.sid}
        for cat in CATEGORIES:
            d[cat.manifest_key] = bool(self.existed.get(cat.name, True))
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Manifest":
        existed: Dict[str, bool] = {}
        for cat in CATEGORIES:
            v = d.get(cat.manifest_key)
            if v is not None:
                existed[cat.name] = bool(v)
        return Manifest(
            timestamp=str(d.get("timestamp", "")),
            sid=str(d.get("sid", "") or ""),
            existed=existed,
        )


@dataclass
class BackupInfo:
    path: Path
    manifest: Optional[Manifest] = None
    fragments: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.name


class BackupStore:
    def __init__(self, logger: logging.Logger, root: Path, clock: Optional[Clock] = None):
        self.logger = logger
        self.root = Path(root).expanduser()
        self.clock: Clock = clock or _dt.datetime.now

    # -- naming ---------------------------------------------------------------

    @staticmethod
    def folder_name(now: _dt.datetime, suffix: int = 0) -> str:
        base = f"{FOLDER_PREFIX}{U.now_ts(now)}"
        return f"{base}-{suffix:02d}" if suffix else base

    def new_folder(self, *, now: Optional[_dt.datetime] = None, dry_run: bool = False) -> Path:
        """
        Pick a fresh folder for `now`; same-second collisions get -01, -02, ...
        which still sort after the bare name.
        """
        now = now or self.clock()
        for suffix in range(0, MAX_SUFFIX + 1):
            candidate = self.root / self.folder_name(now, suffix)
            if candidate.exists():
                continue
            if dry_run:
                return candidate
            try:
                candidate.mkdir(parents=True, exist_ok=False)
            except FileExistsError:
                continue
            self.logger.info("📁 Backup folder: %s", candidate)
            return candidate
        raise Fatal(2, f"Too many backup folders for {U.now_ts(now)} under {self.root}")

    # -- lookup ---------------------------------------------------------------

    def folders(self) -> List[Path]:
        """Backup folders, newest first."""
        if not self.root.is_dir():
            return []
        found = [p for p in self.root.iterdir() if p.is_dir() and _FOLDER_RE.match(p.name)]
        return sorted(found, key=lambda p: p.name, reverse=True)

    def latest(self) -> Optional[Path]:
        found = self.folders()
        return found[0] if found else None

    def resolve(self, explicit: Optional[Path] = None) -> Path:
        if explicit is not None:
            p = Path(explicit).expanduser()
            if not p.is_dir():
                raise NotFoundError(msg=f"Backup folder not found: {p}")
            return p

        latest = self.latest()
        if latest is None:
            raise NotFoundError(msg=f"No backups found under {self.root}")
        self.logger.info("Using most recent backup: %s", latest)
        return latest

    # -- manifest -------------------------------------------------------------

    def write_manifest(self, folder: Path, manifest: Manifest, *, dry_run: bool = False) -> Path:
        path = folder / MANIFEST_NAME
        if dry_run:
            Log.dry(self.logger, "Would write %s: %s", path, json.dumps(manifest.to_dict()))
            return path
        U.atomic_write_text(path, manifest.to_json())
        self.logger.info("📝 Pre-state manifest written: %s", path)
        return path

    def read_manifest(self, folder: Path) -> Optional[Manifest]:
        path = folder / MANIFEST_NAME
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8-sig"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            self.logger.warning("Unreadable manifest %s: %s", path, e)
            return None
        if not isinstance(data, dict):
            self.logger.warning("Manifest %s is not a JSON object; ignoring it", path)
            return None
        return Manifest.from_dict(data)

    def has_manifest(self, folder: Path) -> bool:
        return (folder / MANIFEST_NAME).exists()

    def describe(self, folder: Path) -> BackupInfo:
        fragments = sorted(p.name for p in folder.glob("*.reg") if p.is_file())
        return BackupInfo(path=folder, manifest=self.read_manifest(folder), fragments=fragments)

    def list(self) -> List[BackupInfo]:
        return [self.describe(p) for p in self.folders()]
