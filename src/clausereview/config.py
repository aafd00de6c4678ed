"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:         str = "clausereview"
    db_url:           str = "sqlite:///clausereview.db"
    staging_dir:      str = Field(default=".clausereview/staging", description="Staging directory for decoded JSON snapshots")
    output_dir:       str = Field(default="dist", description="Directory for exported findings JSON")
    max_categories:   int = Field(default=20, ge=1, description="Max categories returned by the keyword prefilter")
    keyword_weight:   int = Field(default=2,  ge=0, description="Score added per matched signal keyword")
    synonym_weight:   int = Field(default=3,  ge=0, description="Score added per matched synonym")
    default_category: str = Field(default="GENERAL", description="Bucket for rules without a category")
    diff_timeout:   float = Field(default=0.0, ge=0, description="Seconds allowed for a diff; 0 = unbounded")
    log_level:        str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then CLAUSEREVIEW_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"CLAUSEREVIEW_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
