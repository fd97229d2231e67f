"""Parser configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDBLOCKS_"


class Settings(BaseModel):
    output_dir:     str  = Field(default="out",  description="Directory for parsed element JSON files")
    normalize_html: bool = Field(default=True,   description="Rewrite HTML in documents as markdown before parsing")
    embed_images:   bool = Field(default=True,   description="Embed local images as base64 data URIs")
    toc_min_level:  int  = Field(default=1, ge=1, le=6, description="Shallowest heading level in the TOC")
    toc_max_level:  int  = Field(default=6, ge=1, le=6, description="Deepest heading level in the TOC")

    @model_validator(mode="after")
    def _check_toc_range(self) -> "Settings":
        if self.toc_min_level > self.toc_max_level:
            raise ValueError("toc_min_level must not exceed toc_max_level")
        return self


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDBLOCKS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
