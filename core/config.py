import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError
from forwarders.registry import FORWARDERS

logger = logging.getLogger(__name__)


class PipelineConfig(BaseModel):
    """Process wiring for the beacon receiver: where to listen and what to do with beacons."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    host: str = Field("127.0.0.1", description="Address the receiver binds to")
    port: int = Field(8080, description="Port the receiver listens on")
    path: str = Field("/beacon", description="URL path beacons are posted to")
    forwarder: str = Field("console", description="Name of the forwarder for mapped beacons")
    separator: str = Field("\n", description="Written after each forwarded document")
    svg_settings: Optional[str] = Field(None, alias="svgSettings")
    svg_template: Optional[str] = Field(None, alias="svgTemplate")
    log_level: str = Field("INFO", alias="logLevel")

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        if not v.startswith('/'):
            raise ValueError("Path must start with /")
        return v

    @field_validator('forwarder')
    @classmethod
    def validate_forwarder(cls, v):
        if v not in FORWARDERS:
            raise ValueError(f"Unknown forwarder '{v}', expected one of: {', '.join(sorted(FORWARDERS))}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{v}'")
        return level

    def mapper_options(self) -> Dict[str, Optional[str]]:
        return {"svgSettings": self.svg_settings, "svgTemplate": self.svg_template}


def load_config(data: Optional[Dict[str, Any]] = None, source: Optional[str] = None,
                **overrides: Any) -> PipelineConfig:
    """
    Validate raw config values; keyword overrides that are not None win over `data`.
    """
    values = dict(data or {})
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return PipelineConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError("Invalid pipeline configuration", source, str(e))


def load_config_file(file_path: Union[str, Path], **overrides: Any) -> PipelineConfig:
    file_path = Path(file_path)
    if not file_path.exists():
        raise ConfigurationError("Config file not found", str(file_path))

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError("Failed to parse YAML", str(file_path), e)

    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", str(file_path))

    config = load_config(data, str(file_path), **overrides)
    logger.info(f"Loaded pipeline config from {file_path}")
    return config
