"""
Configuration for displacement field regularization.

YAML-loadable dataclass holding the regularizer parameters.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml


@dataclass
class RegularizerConfig:
    """Configuration for Gaussian regularization of displacement fields."""

    dimension: int = 3
    standard_deviations: float | list[float] = 1.0  # scalar or one value per axis
    maximum_error: float = 0.1
    maximum_kernel_width: int = 30

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegularizerConfig":
        """
        Build a configuration from a dictionary.

        Args:
            data: Mapping of parameter names to values

        Returns:
            RegularizerConfig instance
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown regularizer configuration keys: {unknown}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RegularizerConfig":
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML config file

        Returns:
            RegularizerConfig instance
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Output path
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
