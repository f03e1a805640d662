"""Tests for configuration loading."""

from pathlib import Path

import pytest
from diffcritic.config.loader import ConfigError, _parse_config, load_config
from diffcritic.config.settings import Settings
from diffcritic.progress import JobPolicy


class TestSettings:
  def test_default_settings(self) -> None:
    settings = Settings()
    assert settings.provider == "deepseek"
    assert settings.model is None
    assert settings.chunk_size == 8000
    assert settings.overlap_lines == 3
    assert settings.large_file_threshold == 15000
    assert settings.concurrency == 3
    assert settings.llm_timeout == 60.0
    assert settings.progress_retention_seconds == 3600
    assert settings.job_policy == JobPolicy.OVERWRITE
    assert settings.review_window_days == 7

  def test_custom_settings(self) -> None:
    settings = Settings(provider="openai", model="gpt-4o", concurrency=5)
    assert settings.provider == "openai"
    assert settings.model == "gpt-4o"
    assert settings.concurrency == 5

  def test_overlap_must_be_small(self) -> None:
    with pytest.raises(ValueError):
      Settings(chunk_size=10, overlap_lines=5)

  def test_unknown_keys_rejected(self) -> None:
    with pytest.raises(ValueError):
      Settings(max_comments=10)


class TestConfigLoader:
  def test_load_default_config(self, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert load_config() == Settings()

  def test_load_from_file(self, tmp_path: Path) -> None:
    path = tmp_path / "review.yaml"
    path.write_text("""
provider: anthropic
model: claude-3-5-sonnet-latest
chunk_size: 6000
concurrency: 2
job_policy: reject
cache_backend: disk
exclude_extensions:
  - lock
  - .min.js
""")

    settings = load_config(path)

    assert settings.provider == "anthropic"
    assert settings.model == "claude-3-5-sonnet-latest"
    assert settings.chunk_size == 6000
    assert settings.concurrency == 2
    assert settings.job_policy == JobPolicy.REJECT
    assert settings.cache_backend == "disk"
    assert settings.exclude_extensions == ["lock", ".min.js"]

  def test_discovers_file_in_cwd(self, tmp_path: Path, monkeypatch) -> None:
    (tmp_path / ".diffcritic.yaml").write_text("provider: ollama\n")
    monkeypatch.chdir(tmp_path)
    assert load_config().provider == "ollama"

  def test_missing_explicit_file(self, tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
      load_config(tmp_path / "missing.yaml")

  def test_invalid_yaml(self, tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("provider: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
      load_config(path)

  def test_non_mapping(self, tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
      load_config(path)

  def test_parse_config_with_enums(self) -> None:
    settings = _parse_config({"provider": "ollama", "job_policy": "overwrite"})
    assert settings.provider == "ollama"
    assert settings.job_policy == JobPolicy.OVERWRITE

  def test_invalid_values(self) -> None:
    with pytest.raises(ConfigError, match="Invalid configuration"):
      _parse_config({"concurrency": 0})
    with pytest.raises(ConfigError):
      _parse_config({"job_policy": "queue"})
