from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, validator


class ModelConfig(BaseModel):
    """Model-level settings for the LLM used to explain incorrect answers."""

    name: str = Field(..., description="LLM identifier.")
    temperature: float = Field(0.3, ge=0, le=2)
    max_output_tokens: int = Field(800, ge=64)


class GradingConfig(BaseModel):
    """Controls for report grading and explanation requests."""

    default_feedback: Literal["full", "summary"] = "summary"
    explanation_fallback: Optional[str] = Field(
        None,
        description="Text stored on an answer when its explanation request fails.",
    )
    max_concurrent_explanations: int = Field(4, ge=1)


class PathsConfig(BaseModel):
    """Filesystem layout for the profile, goal and report blobs plus logs."""

    data_dir: Path = Field(Path("data"))
    logs_dir: Path = Field(Path("logs"))

    @property
    def profile_path(self) -> Path:
        return self.data_dir / "profile.json"

    @property
    def goals_path(self) -> Path:
        return self.data_dir / "goals.json"

    @property
    def reports_path(self) -> Path:
        return self.data_dir / "reports.jsonl"


class LoggingConfig(BaseModel):
    """Controls for logging output and format."""

    level: str = Field("INFO")
    use_json: bool = False

    @validator("level")
    def normalize_level(cls, value: str) -> str:
        """Upper-case the level name so YAML may use any casing."""
        return value.upper()


class Settings(BaseModel):
    """Top-level project configuration aggregating all sub-settings."""

    project_name: str = Field("Teststar")
    model: ModelConfig
    grading: GradingConfig = Field(default_factory=GradingConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
