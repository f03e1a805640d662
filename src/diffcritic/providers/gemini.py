"""Google Gemini provider."""

from typing import Any

from diffcritic.providers.base import HostedProvider, LLMCallError, ReviewProvider
from diffcritic.providers.registry import register_provider


class GeminiProvider(HostedProvider):
  """Gemini models; the review rules go in as the system instruction."""

  NAME = "gemini"
  DEFAULT_MODEL = "gemini-1.5-flash"
  API_KEY_ENV = "GEMINI_API_KEY"
  INSTALL_HINT = "pip install 'diffcritic[gemini]'"

  def _create_client(self) -> Any:
    import google.generativeai as genai
    genai.configure(api_key=self._api_key)
    return genai

  async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
    model = self.client.GenerativeModel(self._model, system_instruction=system_prompt)
    response = await model.generate_content_async(
      user_prompt,
      generation_config={
        "response_mime_type": "application/json",
        "max_output_tokens": self.MAX_TOKENS,
      },
    )
    if not response.candidates:
      raise LLMCallError("gemini returned no candidates")
    return response.text


def _create_gemini(model: str | None) -> ReviewProvider:
  return GeminiProvider(model)


register_provider("gemini", _create_gemini)
