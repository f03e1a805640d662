"""Ollama provider for locally served models."""

import os

import httpx

from diffcritic.providers.base import ReviewProvider
from diffcritic.providers.registry import register_provider


class OllamaProvider(ReviewProvider):
  """Talks to an Ollama server's chat endpoint. No API key; available when the server answers."""

  DEFAULT_MODEL = "codellama"
  DEFAULT_HOST = "http://localhost:11434"
  PROBE_TIMEOUT = 5.0
  REQUEST_TIMEOUT = 120.0

  def __init__(self, model: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
    self._model = model or self.DEFAULT_MODEL
    self._host = os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST).rstrip("/")
    self._transport = transport

  @property
  def name(self) -> str:
    return "ollama"

  @property
  def model(self) -> str:
    return self._model

  def is_available(self) -> bool:
    try:
      return httpx.get(f"{self._host}/api/tags", timeout=self.PROBE_TIMEOUT).is_success
    except httpx.HTTPError:
      return False

  async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
    async with httpx.AsyncClient(
      base_url=self._host, timeout=self.REQUEST_TIMEOUT, transport=self._transport,
    ) as client:
      response = await client.post("/api/chat", json={
        "model": self._model,
        "messages": [
          {"role": "system", "content": system_prompt},
          {"role": "user", "content": user_prompt},
        ],
        "stream": False,
        "format": "json",
        "options": {"temperature": 0.2},
      })
      response.raise_for_status()
    return response.json().get("message", {}).get("content", "")


def _create_ollama(model: str | None) -> ReviewProvider:
  return OllamaProvider(model)


register_provider("ollama", _create_ollama)
