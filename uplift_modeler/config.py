"""Configuration management for the uplift modeler."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "settings.yaml"
DEFAULT_BENCHMARKS_PATH = CONFIG_DIR / "benchmarks.yaml"
DEFAULT_DOMAINS_PATH = CONFIG_DIR / "domains.yaml"


def read_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping, returning an empty dict for an empty file."""
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


@dataclass
class AppSettings:
    """Presentation settings."""
    title: str = "Identity Uplift Modeler"
    company_name: str = "Publisher"
    horizon_months: int = 36


@dataclass
class StorageSettings:
    """Lead record storage settings."""
    lead_store_path: str = "data/lead_store.json"
    lead_key: str = "leadData"
    lead_store_path_env_var: str = "UPLIFT_LEAD_STORE_PATH"

    @property
    def resolved_lead_store_path(self) -> Path:
        override = os.environ.get(self.lead_store_path_env_var)
        path = Path(override) if override else Path(self.lead_store_path)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


@dataclass
class DefaultInputs:
    """Initial slider and selector values."""
    display_cpm: float = 4.50
    video_cpm: float = 15.00
    capi_campaigns_per_month: int = 10
    avg_campaign_spend: float = 100000.0
    risk_posture: str = "moderate"
    scope: str = "id-capi-performance"


@dataclass
class Settings:
    """Application settings."""
    app: AppSettings = field(default_factory=AppSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    defaults: DefaultInputs = field(default_factory=DefaultInputs)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from YAML configuration file."""
    if config_path is None:
        config_path = DEFAULT_SETTINGS_PATH

    if not config_path.exists():
        return Settings()

    data = read_yaml(config_path)

    return Settings(
        app=AppSettings(**data.get("app", {})),
        storage=StorageSettings(**data.get("storage", {})),
        defaults=DefaultInputs(**data.get("defaults", {})),
    )


# Global settings instance
settings = load_settings()
