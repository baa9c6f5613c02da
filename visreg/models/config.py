"""Configuration models for the visual regression harness."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_serializer,
    field_validator,
    model_validator,
)

from visreg.models.checks import ChecksConfig
from visreg.url_utils import join_url


def _resolve_env(value: str) -> str:
    if isinstance(value, str) and value.startswith("env:"):
        env_var = value[4:]
        resolved = os.environ.get(env_var)
        if resolved is None:
            raise ValueError(f"Environment variable '{env_var}' not set")
        return resolved
    return value


class ViewportConfig(BaseModel):
    name: str = "Desktop"
    width: int = Field(default=1280, gt=0)
    height: int = Field(default=800, gt=0)


class EnvironmentConfig(BaseModel):
    """One deployment of the site: a base URL and the ordered page paths to visit."""

    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseUrl")
    urls: list[str] = Field(default_factory=lambda: ["/"])

    # Raw "env:VAR" reference, written back on save instead of the resolved URL
    _base_url_ref: Optional[str] = PrivateAttr(default=None)

    @field_validator("base_url", mode="before")
    @classmethod
    def resolve_base_url(cls, v: str) -> str:
        v = _resolve_env(v)
        if not isinstance(v, str) or not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v

    @model_validator(mode="wrap")
    @classmethod
    def keep_env_reference(cls, data, handler):
        env = handler(data)
        if isinstance(data, dict):
            raw = data.get("base_url", data.get("baseUrl"))
            if isinstance(raw, str) and raw.startswith("env:"):
                env._base_url_ref = raw
        return env

    @field_serializer("base_url")
    def serialize_base_url(self, v: str) -> str:
        return self._base_url_ref or v

    def page_url(self, page_path: str) -> str:
        return join_url(self.base_url, page_path)


class FrameworkConfig(BaseModel):
    # Environments
    staging: EnvironmentConfig
    prod: EnvironmentConfig

    # Device profiles (one report per device)
    devices: list[ViewportConfig] = Field(
        default_factory=lambda: [ViewportConfig(name="Desktop", width=1280, height=800)]
    )

    # Normalization frame
    canonical_width: int = Field(default=1280, gt=0)
    canonical_height: int = Field(default=800, gt=0)

    # Comparison policy
    pass_threshold: float = Field(default=95.0, ge=0.0, le=100.0)
    pixel_threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    diff_color: tuple[int, int, int] = (0, 0, 255)  # prod brighter
    diff_color_alt: tuple[int, int, int] = (255, 165, 0)  # staging brighter

    # Capture timing
    navigation_timeout_seconds: float = Field(default=60.0, gt=0)
    force_capture_seconds: float = Field(default=10.0, gt=0)
    max_run_seconds: int = Field(default=3600, gt=0)

    # Browser
    headless: bool = True
    user_agent: Optional[str] = None

    # Reporting
    output_dir: str = "."
    report_formats: list[str] = Field(default_factory=lambda: ["html", "json"])

    # Functional checks
    checks: ChecksConfig = Field(default_factory=ChecksConfig)

    @field_validator("diff_color", "diff_color_alt")
    @classmethod
    def validate_color(cls, v: tuple[int, int, int]) -> tuple[int, int, int]:
        if any(c < 0 or c > 255 for c in v):
            raise ValueError(f"Color channels must be within 0-255, got {v}")
        return v

    def get_device(self, name: str) -> ViewportConfig:
        for device in self.devices:
            if device.name.lower() == name.lower():
                return device
        raise KeyError(f"Unknown device: {name}")

    @classmethod
    def load(cls, path: str | Path) -> "FrameworkConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
