"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "walletroles"
VERIFIED_WALLETS_FILENAME: Final[str] = "verified.json"
SNAPSHOTS_FILENAME: Final[str] = "roles.json"
ASSET_ATTRIBUTES_FILENAME: Final[str] = "asset-attributes.json"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    verified_filename: str = VERIFIED_WALLETS_FILENAME
    snapshots_filename: str = SNAPSHOTS_FILENAME
    attributes_filename: str = ASSET_ATTRIBUTES_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def verified_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.verified_filename

    def snapshots_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.snapshots_filename

    def attributes_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.attributes_filename


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("WALLETROLES_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    attributes = os.getenv("WALLETROLES_ATTRIBUTES_FILE")
    if attributes:
        return StorageConfig(data_dir=data_dir, attributes_filename=attributes)
    return StorageConfig(data_dir=data_dir)
