"""LLM review of repository changes."""

__version__ = "0.1.0"
