"""Configuration management with dataclasses and YAML loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class ServicesConfig:
    """Remote analysis service endpoints."""

    extractor_url: str = ""
    predictor_url: str = ""
    timeout: float | None = None  # seconds, None waits indefinitely

    def __post_init__(self) -> None:
        """Load endpoints from environment if not set."""
        if not self.extractor_url:
            self.extractor_url = os.getenv(
                "VORMA_EXTRACTOR_URL", "https://vorma-backend-extractor.onrender.com"
            )
        if not self.predictor_url:
            self.predictor_url = os.getenv(
                "VORMA_PREDICTOR_URL", "https://vorma-backend-predictor.onrender.com"
            )
        self.extractor_url = self.extractor_url.rstrip("/")
        self.predictor_url = self.predictor_url.rstrip("/")


@dataclass
class PacingConfig:
    """Progress pacing configuration."""

    min_display_seconds: float = 5.0


@dataclass
class HeatmapConfig:
    """Heatmap canvas configuration."""

    width: int = 300
    height: int = 450
    dpi: int = 100


@dataclass
class Settings:
    """Main application settings."""

    services: ServicesConfig = field(default_factory=ServicesConfig)
    pacing: PacingConfig = field(default_factory=PacingConfig)
    heatmap: HeatmapConfig = field(default_factory=HeatmapConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from dictionary."""
        return cls(
            services=ServicesConfig(**data.get("services", {})),
            pacing=PacingConfig(**data.get("pacing", {})),
            heatmap=HeatmapConfig(**data.get("heatmap", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        from dataclasses import asdict

        return asdict(self)


# Global settings instance
_settings: Settings | None = None


def get_settings(config_path: str | Path | None = None) -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        if config_path is None:
            # Default config paths to check
            for candidate in [
                Path("config/settings.yaml"),
                Path.home() / ".config/vorma/settings.yaml",
            ]:
                if candidate.exists():
                    config_path = candidate
                    break

        _settings = Settings.from_yaml(config_path) if config_path else Settings()

    return _settings


def reload_settings(config_path: str | Path | None = None) -> Settings:
    """Force reload settings from file."""
    global _settings
    _settings = None
    return get_settings(config_path)
