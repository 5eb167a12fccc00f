# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/cli/args/helpers.py
from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any, Dict, Optional


def _require(v: Any) -> bool:
    """True if v is meaningfully present (treats empty/whitespace-only strings as missing)."""
    if v is None:
        return False
    if isinstance(v, str):
        return v.strip() != ""
    return True


def _merged_get(args: argparse.Namespace, conf: Dict[str, Any], key: str) -> Any:
    """
    Prefer CLI override if present (non-empty), else config.
    """
    v = getattr(args, key, None)
    if _require(v):
        return v
    return conf.get(key)


def _default_backup_root(env: Optional[Dict[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    base = env.get("LOCALAPPDATA")
    if base:
        return Path(base) / "gamebarfix" / "backups"
    return Path.home() / "gamebarfix" / "backups"


def _resolve_backup_root(args: argparse.Namespace, conf: Dict[str, Any]) -> Path:
    v = _merged_get(args, conf, "backup_root")
    if _require(v):
        return Path(os.path.expandvars(str(v))).expanduser()
    return _default_backup_root()


def _resolve_backup_path(args: argparse.Namespace, conf: Dict[str, Any]) -> Optional[Path]:
    v = _merged_get(args, conf, "backup_path")
    if _require(v):
        return Path(os.path.expandvars(str(v))).expanduser()
    return None
