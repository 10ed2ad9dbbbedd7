"""Configuration management for the hand pose estimation system."""

from pathlib import Path
from typing import Any, Dict, Union
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class _FrozenModel(BaseModel):
    """Immutable base for every configuration section."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())


class DetectorConfig(_FrozenModel):
    """Configuration for the hand-region detector model."""
    model_path: str = Field("handdetect.pt", description="Detector model locator, relative to model_base_path")
    input_size: int = Field(256, ge=32, description="Square input resolution expected by the detector")


class SkeletonConfig(_FrozenModel):
    """Configuration for the landmark (skeleton) model."""
    model_path: str = Field("handskeleton.pt", description="Skeleton model locator, relative to model_base_path")
    input_size: int = Field(256, ge=32, description="Square crop resolution expected by the skeleton model")


class HandConfig(_FrozenModel):
    """Configuration for the hand pipeline."""
    enabled: bool = Field(True, description="Load the detector and run hand detection")
    landmarks: bool = Field(True, description="Load the skeleton model and regress landmarks")
    min_confidence: float = Field(0.1, ge=0.0, le=1.0, description="Minimum detection/landmark confidence")
    iou_threshold: float = Field(0.1, ge=0.0, le=1.0, description="IoU threshold for non-maximum suppression")
    max_detected: int = Field(1, ge=1, description="Maximum number of hands returned per frame")
    crop_scale: float = Field(1.65, gt=0.0, description="Enlargement of the detector box before landmark regression")
    detector: DetectorConfig = Field(default_factory=DetectorConfig)
    skeleton: SkeletonConfig = Field(default_factory=SkeletonConfig)


class RuntimeConfig(_FrozenModel):
    """Configuration for runtime behavior."""
    device: str = Field("cpu", description="Device to use: cpu, cuda, or auto")

    @field_validator('device')
    @classmethod
    def validate_device(cls, v):
        if v not in ['cpu', 'cuda', 'auto']:
            raise ValueError('device must be one of: cpu, cuda, auto')
        return v


class LoggingConfig(_FrozenModel):
    """Configuration for logging and result output."""
    out_dir: str = Field("runs/hands", description="Output directory for per-frame results")
    write_jsonl: bool = Field(True, description="Write results to JSONL format")
    write_csv: bool = Field(True, description="Write results to CSV format")
    log_level: str = Field("INFO", description="Logging level")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        if v not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError('log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL')
        return v


class ApiConfig(_FrozenModel):
    """Configuration for the HTTP API."""
    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(8000, ge=1, le=65535, description="Bind port")


class Config(_FrozenModel):
    """Main configuration class for the hand pose estimation system."""
    model_base_path: str = Field("models", description="Prefix joined to relative model paths")
    debug: bool = Field(False, description="Emit diagnostic log entries for model loading")
    hand: HandConfig = Field(default_factory=HandConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return self.model_dump(exclude_none=True)


def load_config(path: Union[str, Path]) -> Config:
    """Load the configuration file at ``path``."""
    return Config.from_yaml(path)
