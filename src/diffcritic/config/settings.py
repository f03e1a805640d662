"""Application settings."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from diffcritic.progress import JobPolicy


class Settings(BaseModel):
  """Application configuration."""

  model_config = ConfigDict(use_enum_values=False, extra="forbid")

  provider: str = "deepseek"
  model: str | None = None

  chunk_size: int = Field(8000, gt=0)
  overlap_lines: int = Field(3, ge=0)
  boundary_lookback: int = Field(50, ge=0)
  header_scan_lines: int = Field(20, ge=0)
  large_file_threshold: int = Field(15000, gt=0)
  summarize_limit: int = Field(10000, gt=0)

  concurrency: int = Field(3, ge=1)
  llm_timeout: float = Field(60.0, gt=0)

  progress_retention_seconds: float = Field(3600, ge=0)
  job_policy: JobPolicy = JobPolicy.OVERWRITE

  cache_backend: Literal["memory", "disk"] = "memory"
  cache_dir: str = ".diffcritic-cache"
  cache_ttl_seconds: int | None = None

  exclude_extensions: list[str] = Field(default_factory=list)
  style_guide: str | None = None
  review_window_days: int = Field(7, gt=0)
  fetch_content: bool = True

  @model_validator(mode="after")
  def _check_overlap(self) -> "Settings":
    if self.overlap_lines * 2 >= self.chunk_size:
      raise ValueError("overlap_lines must be small relative to chunk_size")
    return self
