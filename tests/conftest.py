from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from tests.shared.scheduler import FakeScheduler  # noqa: E402


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
