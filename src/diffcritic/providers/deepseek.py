"""DeepSeek provider over its OpenAI-compatible API."""

from diffcritic.providers.base import ReviewProvider
from diffcritic.providers.openai import OpenAIProvider
from diffcritic.providers.registry import register_provider


class DeepSeekProvider(OpenAIProvider):
  """DeepSeek coder models."""

  NAME = "deepseek"
  DEFAULT_MODEL = "deepseek-coder"
  API_KEY_ENV = "DEEPSEEK_API_KEY"
  BASE_URL_ENV = "DEEPSEEK_API_URL"
  DEFAULT_BASE_URL = "https://api.deepseek.com"
  # Older deployments reject response_format
  JSON_MODE = False


def _create_deepseek(model: str | None) -> ReviewProvider:
  return DeepSeekProvider(model)


register_provider("deepseek", _create_deepseek)
