"""LLM providers for code review."""

from diffcritic.providers.base import LLMCallError, ReviewProvider
from diffcritic.providers.parser import Parsed, ParseError, ParseFailed, parse_review_response
from diffcritic.providers.registry import (
  ProviderNotFoundError,
  ProviderRegistry,
  ProviderUnavailableError,
  get_provider,
)

__all__ = [
  "LLMCallError",
  "Parsed",
  "ParseError",
  "ParseFailed",
  "ProviderNotFoundError",
  "ProviderRegistry",
  "ProviderUnavailableError",
  "ReviewProvider",
  "get_provider",
  "parse_review_response",
]
