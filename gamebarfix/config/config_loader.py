# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/config/config_loader.py
"""
YAML/JSON config files, merged and applied as argparse defaults.

Config keys mirror argparse dests (mode, dry_run, backup_root, ...), so a
config file can set anything a flag can and a flag always wins.
"""
from __future__ import annotations

import argparse
import glob
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from ..core.exceptions import Fatal
from ..core.utils import U


class Config:
    @staticmethod
    def expand_configs(logger: logging.Logger, paths: Sequence[str]) -> List[Path]:
        """
        Expand ~, env vars and globs. A literal path that doesn't exist is fatal;
        a glob matching nothing only logs a warning.
        """
        out: List[Path] = []
        for raw in paths:
            s = os.path.expandvars(os.path.expanduser(str(raw)))
            if any(ch in s for ch in "*?["):
                matches = sorted(glob.glob(s))
                if not matches:
                    logger.warning("Config glob matched nothing: %s", s)
                out.extend(Path(m) for m in matches)
                continue
            p = Path(s)
            if not p.is_file():
                U.die(logger, f"Config file not found: {p}", 2)
            out.append(p)
        return out

    @staticmethod
    def load_file(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        try:
            text = Path(path).read_text(encoding="utf-8-sig")
        except OSError as e:
            raise Fatal(2, f"Cannot read config {path}: {e}") from e

        try:
            if Path(path).suffix.lower() == ".json":
                data = json.loads(text) if text.strip() else {}
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise Fatal(2, f"Invalid config {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise Fatal(2, f"Config {path} must be a mapping at top level")
        logger.debug("Loaded config %s (%d keys)", path, len(data))
        return data

    @staticmethod
    def merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge; `over` wins, nested dicts merge recursively."""
        out = dict(base)
        for k, v in over.items():
            if isinstance(v, dict) and isinstance(out.get(k), dict):
                out[k] = Config.merge(out[k], v)
            else:
                out[k] = v
        return out

    @staticmethod
    def load_many(logger: logging.Logger, paths: Sequence[Path]) -> Dict[str, Any]:
        conf: Dict[str, Any] = {}
        for p in paths:
            conf = Config.merge(conf, Config.load_file(logger, p))
        return Config.normalize(conf)

    @staticmethod
    def normalize(conf: Dict[str, Any]) -> Dict[str, Any]:
        """Accept dashed keys (backup-root) as well as dests (backup_root)."""
        return {str(k).replace("-", "_"): v for k, v in conf.items()}

    @staticmethod
    def apply_as_defaults(
        logger: logging.Logger,
        parser: argparse.ArgumentParser,
        conf: Dict[str, Any],
        *,
        ignore: Optional[Sequence[str]] = ("config",),
    ) -> None:
        dests = {a.dest for a in parser._actions if a.dest and a.dest != argparse.SUPPRESS}
        defaults: Dict[str, Any] = {}
        for k, v in conf.items():
            if ignore and k in ignore:
                continue
            if k not in dests:
                logger.debug("Ignoring unknown config key: %s", k)
                continue
            defaults[k] = v
        if defaults:
            logger.debug("Config defaults: %s", ", ".join(sorted(defaults)))
            parser.set_defaults(**defaults)
