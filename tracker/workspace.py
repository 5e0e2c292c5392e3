"""Workspace root, settings and path helpers for the habit tracker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from tracker.fileio import read_yaml, write_yaml_atomic

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def workspace_root() -> Path:
    """Get the workspace root directory (holds state.json and settings.yaml)."""
    return Path(
        os.environ.get("HABITS_ROOT", str(Path.home() / "habits"))
    ).expanduser().resolve()


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    log_level: str = "INFO"
    log_file: str = "logs/habits.log"
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        level = str(d.get("log_level", "INFO") or "INFO").upper()
        if level not in LOG_LEVELS:
            level = "INFO"
        try:
            port = int(d.get("port", DEFAULT_PORT))
        except (TypeError, ValueError):
            port = DEFAULT_PORT
        log_file = d.get("log_file", "logs/habits.log")
        return cls(
            log_level=level,
            log_file="" if log_file is None else str(log_file),
            host=str(d.get("host", "127.0.0.1") or "127.0.0.1"),
            port=port,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "log_level": self.log_level,
            "log_file": self.log_file,
            "host": self.host,
            "port": self.port,
        }


def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults. ``PORT`` overrides the port."""
    if root is None:
        root = workspace_root()
    try:
        settings = Settings.from_dict(read_yaml(settings_path(root)))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", settings_path(root), e)
        settings = Settings()
    env_port = os.environ.get("PORT")
    if env_port:
        try:
            settings.port = int(env_port)
        except ValueError:
            logger.warning("Ignoring non-numeric PORT=%r", env_port)
    return settings


def init_workspace(root: Path | None = None) -> Path:
    """Create the workspace directory and a default settings.yaml if missing."""
    if root is None:
        root = workspace_root()
    root.mkdir(parents=True, exist_ok=True)
    sp = settings_path(root)
    if not sp.exists():
        write_yaml_atomic(sp, Settings().to_dict())
    return root


# ── Path helpers ──────────────────────────────────────────────

def state_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "state.json"


def lock_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "state.lock"


def legacy_state_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "habits_v1.json"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"
