"""Anthropic messages provider."""

from typing import Any

from diffcritic.providers.base import HostedProvider, ReviewProvider
from diffcritic.providers.registry import register_provider


class AnthropicProvider(HostedProvider):
  NAME = "anthropic"
  DEFAULT_MODEL = "claude-3-5-sonnet-latest"
  API_KEY_ENV = "ANTHROPIC_API_KEY"
  INSTALL_HINT = "pip install 'diffcritic[anthropic]'"

  def _create_client(self) -> Any:
    from anthropic import AsyncAnthropic
    return AsyncAnthropic(api_key=self._api_key)

  async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
    message = await self.client.messages.create(
      model=self._model,
      max_tokens=self.MAX_TOKENS,
      system=system_prompt,
      messages=[{"role": "user", "content": user_prompt}],
    )
    # Only text blocks carry the answer
    return "".join(
      block.text for block in message.content if getattr(block, "type", "") == "text"
    )


def _create_anthropic(model: str | None) -> ReviewProvider:
  return AnthropicProvider(model)


register_provider("anthropic", _create_anthropic)
