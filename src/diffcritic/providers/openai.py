"""OpenAI chat-completions provider."""

import os
from typing import Any

from diffcritic.providers.base import HostedProvider, ReviewProvider
from diffcritic.providers.registry import register_provider


class OpenAIProvider(HostedProvider):
  """OpenAI models; OpenAI-compatible backends subclass this with their own endpoint."""

  NAME = "openai"
  DEFAULT_MODEL = "gpt-4o-mini"
  API_KEY_ENV = "OPENAI_API_KEY"
  INSTALL_HINT = "pip install openai"
  BASE_URL_ENV: str | None = None
  DEFAULT_BASE_URL: str | None = None
  TEMPERATURE = 0.2
  JSON_MODE = True

  def __init__(self, model: str | None = None):
    super().__init__(model)
    env_url = os.environ.get(self.BASE_URL_ENV) if self.BASE_URL_ENV else None
    self._base_url = env_url or self.DEFAULT_BASE_URL

  def _create_client(self) -> Any:
    from openai import AsyncOpenAI
    return AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)

  async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
    extra: dict[str, Any] = {}
    if self.JSON_MODE:
      extra["response_format"] = {"type": "json_object"}

    completion = await self.client.chat.completions.create(
      model=self._model,
      messages=[
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
      ],
      temperature=self.TEMPERATURE,
      max_tokens=self.MAX_TOKENS,
      **extra,
    )
    if not completion.choices:
      return ""
    return completion.choices[0].message.content or ""


def _create_openai(model: str | None) -> ReviewProvider:
  return OpenAIProvider(model)


register_provider("openai", _create_openai)
