"""Configuration models loaded from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

DEFAULT_CONFIG_PATH = "config/config.yaml"


class ScoringConfig(BaseModel):
    """Weights and threshold for entity resolution."""

    merge_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    exact_name_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    partial_name_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    shared_property_weight: float = Field(default=0.1, ge=0.0, le=1.0)
    shared_property_cap: float = Field(default=0.3, ge=0.0, le=1.0)
    name_keys: List[str] = Field(default_factory=lambda: ["name", "title", "label"])

    @model_validator(mode="after")
    def _check_name_keys(self) -> "ScoringConfig":
        if not self.name_keys:
            raise ValueError("name_keys must list at least one property key")
        return self


class MergeConfig(BaseModel):
    """Identifier and edge conventions used when merging."""

    synthetic_edge_label: str = "EXPANDED_TO"
    synthetic_edge_properties: Dict[str, Any] = Field(
        default_factory=lambda: {"synthetic": True, "via": "web search", "confidence_score": 0.85}
    )
    node_id_prefix: str = "n"
    edge_id_prefix: str = "e"
    batch_id_prefix: str = "sg"
    # Prefix allocated ids with the batch id, e.g. "sg3_n12".
    namespace_ids_by_batch: bool = False


class OrchestrationConfig(BaseModel):
    """Segment orchestration settings."""

    heartbeat_seconds: float = Field(default=15.0, ge=0.0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = "logs/graphloom.log"
    format: str = "text"
    max_size_mb: int = 100
    backup_count: int = 5


class Config(BaseModel):
    """Root configuration."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    orchestration: OrchestrationConfig = Field(default_factory=OrchestrationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path = DEFAULT_CONFIG_PATH) -> "Config":
        """Load configuration from a YAML file.

        A missing file yields the defaults; an empty file is treated the same.

        Args:
            path: Path to the YAML file

        Returns:
            Parsed configuration
        """
        config_path = Path(path)
        if not config_path.exists():
            return cls()
        with config_path.open("r", encoding="utf-8") as handle:
            data: Optional[Dict[str, Any]] = yaml.safe_load(handle)
        return cls.model_validate(data or {})


_config: Optional[Config] = None


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> Config:
    """Load configuration and register it as the process-wide config."""
    global _config
    _config = Config.from_yaml(path)
    return _config


def get_config() -> Config:
    """Return the process-wide config.

    Raises:
        RuntimeError: If load_config() has not been called
    """
    if _config is None:
        raise RuntimeError("Configuration not loaded. Call load_config() first.")
    return _config
