# SPDX-License-Identifier: LGPL-3.0-or-later
import datetime as _dt
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))

from fakes.fake_logger import FakeLogger  # noqa: E402
from fakes.fake_registry import FakeRegistry  # noqa: E402

SID = "S-1-5-21-1111111111-2222222222-3333333333-1001"


class TickingClock:
    """Returns `start`, then advances by `step` seconds on every call."""

    def __init__(self, start: _dt.datetime, step: int = 1):
        self.now = start
        self.step = _dt.timedelta(seconds=step)

    def __call__(self) -> _dt.datetime:
        cur = self.now
        self.now = cur + self.step
        return cur


@pytest.fixture
def sid():
    return SID


@pytest.fixture
def logger():
    return FakeLogger()


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def clock():
    return TickingClock(_dt.datetime(2024, 3, 1, 12, 30, 0))


@pytest.fixture
def backup_root(tmp_path):
    return tmp_path / "backups"
