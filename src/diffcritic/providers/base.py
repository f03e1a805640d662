"""Base provider protocol."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class LLMCallError(Exception):
  """A review call to the LLM backend failed."""


class ReviewProvider(ABC):
  """Abstract base for LLM review providers.

  Subclasses implement ``_call_api``; ``complete`` wraps every failure in
  LLMCallError so callers handle one exception type.
  """

  MAX_TOKENS = 4096

  async def complete(self, system_prompt: str, user_prompt: str) -> str:
    """Send one review request and return the raw response text."""
    try:
      return await self._call_api(system_prompt, user_prompt)
    except LLMCallError:
      raise
    except Exception as e:
      logger.debug("%s call failed: %s", self.name, e)
      raise LLMCallError(f"{self.name} request failed: {e}") from e

  @abstractmethod
  async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
    """Make a single API call and return the raw text response."""
    ...

  @property
  @abstractmethod
  def name(self) -> str:
    """Provider name."""
    ...

  @property
  @abstractmethod
  def model(self) -> str:
    """Model being used."""
    ...

  @abstractmethod
  def is_available(self) -> bool:
    """Check if provider is configured and available."""
    ...


class HostedProvider(ReviewProvider):
  """Provider for a hosted API authenticated by one environment variable.

  Subclasses set the class attributes and build their SDK client in
  ``_create_client``; the client is created on first use so a missing SDK
  only matters once a review is actually sent.
  """

  NAME = ""
  DEFAULT_MODEL = ""
  API_KEY_ENV = ""
  INSTALL_HINT = ""

  def __init__(self, model: str | None = None):
    self._model = model or self.DEFAULT_MODEL
    self._api_key = os.environ.get(self.API_KEY_ENV) or None
    self._client: Any = None

  @property
  def name(self) -> str:
    return self.NAME

  @property
  def model(self) -> str:
    return self._model

  def is_available(self) -> bool:
    return self._api_key is not None

  @property
  def client(self) -> Any:
    if self._client is None:
      try:
        self._client = self._create_client()
      except ImportError as e:
        raise LLMCallError(f"{self.NAME} SDK not installed. Install with: {self.INSTALL_HINT}") from e
    return self._client

  @abstractmethod
  def _create_client(self) -> Any:
    ...
