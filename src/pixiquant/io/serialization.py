"""YAML serialization for PipelineConfig."""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from pixiquant.core.config import PipelineConfig
from pixiquant.core.exceptions import ConfigError


def config_to_yaml(config: PipelineConfig, path: Path) -> None:
    """Serialize a PipelineConfig to a YAML file.

    Args:
        config: The configuration to serialize.
        path: File path to write.
    """
    with open(path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def config_from_yaml(path: Path, **overrides: Any) -> PipelineConfig:
    """Deserialize a PipelineConfig from a YAML file.

    Missing keys take their defaults. Keyword overrides whose value is not
    None replace values from the file.

    Args:
        path: Path to the YAML file.
        **overrides: Field values that take precedence over the file.

    Returns:
        A validated PipelineConfig.

    Raises:
        FileNotFoundError: If the YAML file doesn't exist.
        ConfigError: If the YAML is not a mapping, has unknown keys or
            invalid values.
    """
    path = Path(path)
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown keys {unknown}")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return PipelineConfig(**data)
