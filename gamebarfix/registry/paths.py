# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/registry/paths.py
"""
The fixed set of per-user registry locations the tool manages.

Every location lives under HKEY_USERS\\<SID> of the *original* (non-elevated)
user, so the SID is always passed in explicitly rather than read from the
elevated session.
"""
from __future__ import annotations

import ntpath
import os
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..core.exceptions import IdentityError

HIVE_ROOT = "HKEY_USERS"

PROTOCOLS: Tuple[str, ...] = ("ms-gamebar", "ms-gamebarservices", "ms-gamingoverlay")

_SID_RE = re.compile(r"^S-1-\d+(-\d+)+$", re.IGNORECASE)


@dataclass(frozen=True)
class RegValue:
    kind: str  # REG_SZ, REG_DWORD, ...
    data: Any

    def describe(self) -> str:
        if self.kind == "REG_DWORD":
            return f"{self.kind} {int(self.data)} (0x{int(self.data):08x})"
        return f"{self.kind} {self.data!r}"


@dataclass(frozen=True)
class Entry:
    """One value the apply step enforces, relative to its category key."""
    subkey: str  # "" for the category key itself
    name: str  # "" is the key's (default) value
    value: RegValue

    @property
    def label(self) -> str:
        name = self.name or "(default)"
        return f"{self.subkey}\\{name}" if self.subkey else name


@dataclass(frozen=True)
class Category:
    name: str
    subpath: str
    fragment: str
    manifest_key: str
    protocol: Optional[str] = None

    def key_path(self, sid: str) -> str:
        return user_key(sid, self.subpath)

    def entry_path(self, sid: str, entry: Entry) -> str:
        base = self.key_path(sid)
        return f"{base}\\{entry.subkey}" if entry.subkey else base


FEATURE_FLAG = Category(
    name="gamedvr",
    subpath=r"Software\Microsoft\Windows\CurrentVersion\GameDVR",
    fragment="GameDVR.reg",
    manifest_key="gamedvr_existed",
)
CONFIG_STORE = Category(
    name="gameconfigstore",
    subpath=r"System\GameConfigStore",
    fragment="GameConfigStore.reg",
    manifest_key="gameconfigstore_existed",
)
PROTOCOL_CATEGORIES: Tuple[Category, ...] = tuple(
    Category(
        name=proto,
        subpath=f"Software\\Classes\\{proto}",
        fragment=f"{proto}.reg",
        manifest_key=f"{proto.replace('-', '_')}_existed",
        protocol=proto,
    )
    for proto in PROTOCOLS
)

CATEGORIES: Tuple[Category, ...] = (FEATURE_FLAG, CONFIG_STORE) + PROTOCOL_CATEGORIES

_FLAG_ENTRIES = {
    FEATURE_FLAG.name: Entry("", "AppCaptureEnabled", RegValue("REG_DWORD", 0)),
    CONFIG_STORE.name: Entry("", "GameDVR_Enabled", RegValue("REG_DWORD", 0)),
}

COMMAND_SUBKEY = r"shell\open\command"


def validate_sid(sid: Optional[str]) -> str:
    s = (sid or "").strip()
    if not s:
        raise IdentityError(msg="No target user SID available (pass --sid)")
    if not _SID_RE.match(s):
        raise IdentityError(msg=f"Not a valid SID: {s!r}")
    return "S" + s[1:]


def user_key(sid: str, subpath: str = "") -> str:
    base = f"{HIVE_ROOT}\\{sid}"
    sub = subpath.strip("\\")
    return f"{base}\\{sub}" if sub else base


def default_handler_exe() -> str:
    """systray.exe ships with every Windows install and exits silently."""
    system_root = os.environ.get("SystemRoot") or r"C:\Windows"
    return ntpath.join(system_root, "System32", "systray.exe")


def desired_entries(category: Category, handler_exe: Optional[str] = None) -> List[Entry]:
    """Values the apply step writes for `category`, in write order."""
    if category.protocol is None:
        return [_FLAG_ENTRIES[category.name]]

    exe = handler_exe or default_handler_exe()
    return [
        Entry("", "", RegValue("REG_SZ", f"URL:{category.protocol}")),
        Entry("", "URL Protocol", RegValue("REG_SZ", "")),
        Entry("", "NoOpenWith", RegValue("REG_SZ", "")),
        Entry(COMMAND_SUBKEY, "", RegValue("REG_SZ", exe)),
    ]

