"""Shared test fixtures for habit tracker tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a seeded state file."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    state = {
        "habits": {
            "rd": {
                "name": "Read 20 pages",
                "period": "daily",
                "count": None,
                "lastDone": "2026-02-10",
                "streak": 3,
            },
            "gym": {
                "name": "Gym session",
                "period": "times-per-week",
                "count": 3,
                "lastDone": "2026-02-08",
                "streak": 5,
            },
            "med": {
                "name": "Meditate",
                "period": "daily",
                "count": None,
                "lastDone": "",
                "streak": 0,
            },
        },
        "xp": 120,
        "freezeTokens": 1,
    }
    (root / "state.json").write_text(json.dumps(state, indent=2), encoding="utf-8")

    settings = {"log_level": "DEBUG", "log_file": "", "port": 3100}
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    os.environ["HABITS_ROOT"] = str(root)
    yield root
    if "HABITS_ROOT" in os.environ:
        del os.environ["HABITS_ROOT"]


@pytest.fixture
def empty_workspace(tmp_path: Path) -> Path:
    """A workspace directory with no state file yet."""
    root = tmp_path / "fresh"
    root.mkdir(parents=True)
    os.environ["HABITS_ROOT"] = str(root)
    yield root
    if "HABITS_ROOT" in os.environ:
        del os.environ["HABITS_ROOT"]