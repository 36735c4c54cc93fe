"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

BACKENDS = ("simplex", "highs")
OUTPUT_FORMATS = ("table", "json", "markdown")


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".dietlp"


@dataclass
class OptimizationConfig:
    """Optimization solver configuration."""

    backend: str = "simplex"  # "simplex" or "highs"
    epsilon: float = 1e-7
    pivot_limit_factor: int = 10
    max_pivots: Optional[int] = None  # overrides pivot_limit_factor when set
    display_threshold: float = 0.01
    cost_decimals: int = 2
    nutrient_decimals: int = 1
    prefilter_zero_contribution: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check that values are usable.

        Raises:
            ValueError: If any option is out of range
        """
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown backend: {self.backend}. Choose one of {', '.join(BACKENDS)}"
            )
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.pivot_limit_factor < 1:
            raise ValueError("pivot_limit_factor must be at least 1")
        if self.max_pivots is not None and self.max_pivots < 0:
            raise ValueError("max_pivots must be non-negative")
        if self.display_threshold < 0:
            raise ValueError("display_threshold must be non-negative")


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json", "markdown"
    profile_path: Optional[Path] = None


@dataclass
class Settings:
    """Main application settings."""

    optimization: OptimizationConfig = field(default_factory=OptimizationConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.dietlp/config.yaml

        Returns:
            Settings instance

        Raises:
            ValueError: If the file holds invalid option values
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse optimization config
        if "optimization" in data:
            opt_data = data["optimization"] or {}
            opt = settings.optimization
            if "backend" in opt_data:
                opt.backend = str(opt_data["backend"])
            if "epsilon" in opt_data:
                opt.epsilon = float(opt_data["epsilon"])
            if "pivot_limit_factor" in opt_data:
                opt.pivot_limit_factor = int(opt_data["pivot_limit_factor"])
            if opt_data.get("max_pivots") is not None:
                opt.max_pivots = int(opt_data["max_pivots"])
            if "display_threshold" in opt_data:
                opt.display_threshold = float(opt_data["display_threshold"])
            if "cost_decimals" in opt_data:
                opt.cost_decimals = int(opt_data["cost_decimals"])
            if "nutrient_decimals" in opt_data:
                opt.nutrient_decimals = int(opt_data["nutrient_decimals"])
            if "prefilter_zero_contribution" in opt_data:
                opt.prefilter_zero_contribution = bool(
                    opt_data["prefilter_zero_contribution"]
                )
            opt.validate()

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"] or {}
            if "output_format" in def_data:
                output_format = str(def_data["output_format"])
                if output_format not in OUTPUT_FORMATS:
                    raise ValueError(f"Unknown output format: {output_format}")
                settings.defaults.output_format = output_format
            if def_data.get("profile_path"):
                settings.defaults.profile_path = Path(
                    def_data["profile_path"]
                ).expanduser()

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.dietlp/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        opt = self.optimization
        data = {
            "optimization": {
                "backend": opt.backend,
                "epsilon": opt.epsilon,
                "pivot_limit_factor": opt.pivot_limit_factor,
                "max_pivots": opt.max_pivots,
                "display_threshold": opt.display_threshold,
                "cost_decimals": opt.cost_decimals,
                "nutrient_decimals": opt.nutrient_decimals,
                "prefilter_zero_contribution": opt.prefilter_zero_contribution,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
                "profile_path": (
                    str(self.defaults.profile_path)
                    if self.defaults.profile_path
                    else None
                ),
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings
