"""Find which registered providers can serve a review right now."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
  from diffcritic.providers.base import ReviewProvider


@dataclass(frozen=True)
class ProviderStatus:
  name: str
  available: bool
  reason: str
  model: str = ""
  key_env: str = ""


class ProviderDetector:
  """Probes provider factories in preference order.

  Hosted providers are judged by their API key variable; anything else by
  its own ``is_available`` check (for Ollama, a request to the server).
  """

  PREFERENCE = ("deepseek", "openai", "anthropic", "gemini", "ollama")

  def __init__(self, factories: dict[str, Callable[[str | None], "ReviewProvider"]]):
    self._factories = factories

  def candidates(self) -> list[str]:
    """Registered names, preferred ones first and the rest alphabetically."""
    preferred = [name for name in self.PREFERENCE if name in self._factories]
    others = sorted(name for name in self._factories if name not in self.PREFERENCE)
    return preferred + others

  def probe(self, name: str) -> ProviderStatus:
    try:
      provider = self._factories[name](None)
    except Exception as e:
      return ProviderStatus(name, False, f"failed to load: {e}")

    available = provider.is_available()
    key_env = getattr(provider, "API_KEY_ENV", "")
    if key_env:
      reason = f"{key_env} {'set' if available else 'not set'}"
    else:
      reason = "reachable" if available else "not reachable"
    return ProviderStatus(name, available, reason, provider.model, key_env)

  def detect(self) -> str | None:
    """Name of the first available provider, or None."""
    for name in self.candidates():
      if self.probe(name).available:
        return name
    return None

  def report(self) -> list[ProviderStatus]:
    return [self.probe(name) for name in self.candidates()]

  def format_error(self, failed: str) -> str:
    statuses = self.report()
    if failed == "auto":
      lines = ["No review provider is available."]
    else:
      lines = [f"Provider '{failed}' is not available."]
    lines += ["", "Provider status:"]
    lines += [f"  {'[ok]' if s.available else '[--]'} {s.name}: {s.reason}" for s in statuses]

    missing = next((s for s in statuses if s.name == failed and s.key_env and not s.available), None)
    if missing is not None:
      lines += ["", f"Set {missing.key_env} to use {failed}."]
    return "\n".join(lines)
