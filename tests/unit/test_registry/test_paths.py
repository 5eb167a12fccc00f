# SPDX-License-Identifier: LGPL-3.0-or-later
import pytest

from gamebarfix.core.exceptions import IdentityError
from gamebarfix.registry.paths import (
    CATEGORIES,
    RegValue,
    default_handler_exe,
    desired_entries,
    user_key,
    validate_sid,
)

BY_NAME = {c.name: c for c in CATEGORIES}


def test_five_categories_in_manifest_order():
    assert [c.manifest_key for c in CATEGORIES] == [
        "gamedvr_existed",
        "gameconfigstore_existed",
        "ms_gamebar_existed",
        "ms_gamebarservices_existed",
        "ms_gamingoverlay_existed",
    ]
    assert [c.fragment for c in CATEGORIES] == [
        "GameDVR.reg",
        "GameConfigStore.reg",
        "ms-gamebar.reg",
        "ms-gamebarservices.reg",
        "ms-gamingoverlay.reg",
    ]


def test_key_paths_live_under_the_users_hive():
    sid = "S-1-5-21-1-2-3-1001"

    assert BY_NAME["gamedvr"].key_path(sid) == (
        r"HKEY_USERS\S-1-5-21-1-2-3-1001\Software\Microsoft\Windows\CurrentVersion\GameDVR"
    )
    assert BY_NAME["ms-gamingoverlay"].key_path(sid) == (
        r"HKEY_USERS\S-1-5-21-1-2-3-1001\Software\Classes\ms-gamingoverlay"
    )
    assert user_key(sid) == r"HKEY_USERS\S-1-5-21-1-2-3-1001"


def test_flag_entries():
    (entry,) = desired_entries(BY_NAME["gameconfigstore"])
    assert entry.name == "GameDVR_Enabled"
    assert entry.value == RegValue("REG_DWORD", 0)


def test_protocol_entries(monkeypatch):
    monkeypatch.setenv("SystemRoot", r"D:\Win")
    entries = desired_entries(BY_NAME["ms-gamebarservices"])

    assert [(e.subkey, e.name, e.value.data) for e in entries] == [
        ("", "", "URL:ms-gamebarservices"),
        ("", "URL Protocol", ""),
        ("", "NoOpenWith", ""),
        (r"shell\open\command", "", r"D:\Win\System32\systray.exe"),
    ]


def test_default_handler_without_systemroot(monkeypatch):
    monkeypatch.delenv("SystemRoot", raising=False)

    assert default_handler_exe() == r"C:\Windows\System32\systray.exe"


@pytest.mark.parametrize("sid", ["S-1-5-21-1-2-3-1001", "s-1-5-18", "  S-1-5-21-42-1000 "])
def test_valid_sids(sid):
    assert validate_sid(sid).startswith("S-1-")


@pytest.mark.parametrize("sid", [None, "", "S-1", "S-1-5-", "HKEY_USERS", "S-1-5-21-x-1000"])
def test_invalid_sids(sid):
    with pytest.raises(IdentityError) as ei:
        validate_sid(sid)
    assert ei.value.code == 4
