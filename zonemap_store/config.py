"""
Configuration schema for ZoneRepository.

Defines where the zone collection is persisted and how strictly overlap
is judged. Loaded from YAML and validated at construction.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from zonemap_geometry import DEFAULT_TOLERANCE_M


DEFAULT_STORAGE_KEY = "parking-zones"


@dataclass(frozen=True)
class RepositoryConfig:
    """
    Main configuration for the zone repository.

    Immutable after construction (frozen dataclass).
    """

    # Durable storage
    storage_dir: Path = Path("./data")
    storage_key: str = DEFAULT_STORAGE_KEY

    # Geometry
    overlap_tolerance_m: float = DEFAULT_TOLERANCE_M

    # Observability
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate repository configuration."""
        object.__setattr__(self, "storage_dir", Path(self.storage_dir))

        if not self.storage_key:
            raise ValueError("storage_key cannot be empty")

        if not 0.0 <= self.overlap_tolerance_m < 10.0:
            raise ValueError(
                f"overlap_tolerance_m must be in [0.0, 10.0), got {self.overlap_tolerance_m}"
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of DEBUG, INFO, WARNING, ERROR"
            )

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "RepositoryConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            storage_dir: "./data"
            storage_key: "parking-zones"
            overlap_tolerance_m: 0.1
            log_level: "INFO"
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(
            storage_dir=Path(data.get("storage_dir", "./data")),
            storage_key=data.get("storage_key", DEFAULT_STORAGE_KEY),
            overlap_tolerance_m=float(data.get("overlap_tolerance_m", DEFAULT_TOLERANCE_M)),
            log_level=data.get("log_level", "INFO"),
        )
