from __future__ import annotations

import os
import shlex
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)

from vex_server.config import Settings

FAKE_VEX = Path(__file__).parent / "fixtures" / "fake_vex.py"


def fake_command(**opts) -> str:
    """Command line for the fake extraction program, e.g. fake_command(size=10, writes=3)."""
    parts = [sys.executable, str(FAKE_VEX)]
    for k, v in opts.items():
        parts += [f"--{k}", str(v)]
    return " ".join(shlex.quote(p) for p in parts)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_settings():
    def _make(chunk_size: int = 64 * 1024, db_path: str = "testdb", **opts) -> Settings:
        return Settings(db_path=db_path, command=fake_command(**opts), chunk_size=chunk_size)
    return _make
