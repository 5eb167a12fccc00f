# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/registry/backend.py
"""
Live registry access.

Reads and single-value writes go through `winreg`; subtree export/import/delete
go through reg.exe child processes (blocking), which is what produces the .reg
fragments stored in a backup folder.

Export/import/delete failures are never raised: they are logged as warnings and
reported as False so callers can continue best-effort.
"""
from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ..core.exceptions import Fatal
from ..core.utils import U
from .paths import RegValue


class RegistryBackend(ABC):
    """Operations over full key paths such as HKEY_USERS\\<SID>\\Software\\..."""

    @abstractmethod
    def key_exists(self, path: str) -> bool: ...

    @abstractmethod
    def get_value(self, path: str, name: str) -> Optional[RegValue]: ...

    @abstractmethod
    def set_value(self, path: str, name: str, value: RegValue) -> None:
        """Create the key (and parents) if missing, then write the value."""

    @abstractmethod
    def delete_value(self, path: str, name: str) -> bool: ...

    @abstractmethod
    def export_key(self, path: str, dest: Path) -> bool: ...

    @abstractmethod
    def import_file(self, src: Path) -> bool: ...

    @abstractmethod
    def delete_key(self, path: str) -> bool:
        """Delete the key and everything below it."""


class RegExe:
    """Thin wrapper around reg.exe export/import/delete."""

    def __init__(self, logger: logging.Logger, exe: str = "reg.exe", timeout: int = 60):
        self.logger = logger
        self.exe = exe
        self.timeout = timeout

    def _run(self, args: List[str], what: str) -> bool:
        cmd = [self.exe] + args
        try:
            cp = U.run_cmd(self.logger, cmd, check=False, capture=True, timeout=self.timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            self.logger.warning("%s failed to start: %s", what, e)
            return False
        if cp.returncode != 0:
            detail = (cp.stderr or cp.stdout or "").strip()
            self.logger.warning("%s failed (rc=%s)%s", what, cp.returncode, f": {detail}" if detail else "")
            return False
        return True

    def export(self, path: str, dest: Path) -> bool:
        return self._run(["export", path, str(dest), "/y"], f"reg export {path}")

    def import_(self, src: Path) -> bool:
        return self._run(["import", str(src)], f"reg import {src.name}")

    def delete(self, path: str) -> bool:
        return self._run(["delete", path, "/f"], f"reg delete {path}")


_ROOT_ALIASES = {
    "HKEY_USERS": "HKEY_USERS",
    "HKU": "HKEY_USERS",
    "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
    "HKCU": "HKEY_CURRENT_USER",
    "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
    "HKLM": "HKEY_LOCAL_MACHINE",
}


class WinRegBackend(RegistryBackend):
    def __init__(self, logger: logging.Logger, reg: Optional[RegExe] = None):
        try:
            import winreg
        except ImportError as e:
            raise Fatal(2, "Live registry access needs Windows (winreg is unavailable)") from e
        self._winreg: Any = winreg
        self.logger = logger
        self.reg = reg or RegExe(logger)
        self._type_by_kind = {
            "REG_NONE": winreg.REG_NONE,
            "REG_SZ": winreg.REG_SZ,
            "REG_EXPAND_SZ": winreg.REG_EXPAND_SZ,
            "REG_BINARY": winreg.REG_BINARY,
            "REG_DWORD": winreg.REG_DWORD,
            "REG_MULTI_SZ": winreg.REG_MULTI_SZ,
            "REG_QWORD": winreg.REG_QWORD,
        }
        self._kind_by_type = {v: k for k, v in self._type_by_kind.items()}

    def _split(self, path: str) -> Tuple[Any, str]:
        root, _, sub = path.partition("\\")
        canon = _ROOT_ALIASES.get(root.upper())
        if canon is None:
            raise ValueError(f"unsupported registry root in {path!r}")
        return getattr(self._winreg, canon), sub

    def key_exists(self, path: str) -> bool:
        root, sub = self._split(path)
        try:
            with self._winreg.OpenKey(root, sub, 0, self._winreg.KEY_READ):
                return True
        except FileNotFoundError:
            return False

    def get_value(self, path: str, name: str) -> Optional[RegValue]:
        root, sub = self._split(path)
        try:
            with self._winreg.OpenKey(root, sub, 0, self._winreg.KEY_READ) as k:
                data, vtype = self._winreg.QueryValueEx(k, name)
        except FileNotFoundError:
            return None
        return RegValue(self._kind_by_type.get(vtype, f"REG_TYPE_{vtype}"), data)

    def set_value(self, path: str, name: str, value: RegValue) -> None:
        root, sub = self._split(path)
        vtype = self._type_by_kind[value.kind]
        with self._winreg.CreateKeyEx(root, sub, 0, self._winreg.KEY_WRITE) as k:
            self._winreg.SetValueEx(k, name, 0, vtype, value.data)

    def delete_value(self, path: str, name: str) -> bool:
        root, sub = self._split(path)
        try:
            with self._winreg.OpenKey(root, sub, 0, self._winreg.KEY_SET_VALUE) as k:
                self._winreg.DeleteValue(k, name)
            return True
        except FileNotFoundError:
            return False

    def export_key(self, path: str, dest: Path) -> bool:
        return self.reg.export(path, dest)

    def import_file(self, src: Path) -> bool:
        return self.reg.import_(src)

    def delete_key(self, path: str) -> bool:
        return self.reg.delete(path)
