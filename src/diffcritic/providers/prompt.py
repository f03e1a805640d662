"""Shared prompt construction for providers."""

from diffcritic.models import ReviewChunk

SYSTEM_PROMPT = """You are an expert code reviewer helping developers find problems in code changes and suggest improvements. Analyze the change below, focusing on:
1. Code quality and maintainability
2. Potential bugs and security issues
3. Performance opportunities
4. Adherence to best practices

Respond with a JSON object in exactly this format:
{
  "issues": [
    {
      "severity": "high",
      "line": 42,
      "message": "Description of the issue",
      "suggestion": "How to fix it"
    }
  ]
}

Severity levels: high, medium, low, info.
"line" is the 1-based line number within the text you were given.
If there are no issues, return an empty issues array.
Return only the JSON object, without explanations or Markdown code fences."""


def build_system_prompt(style_guide: str | None = None) -> str:
  """Build the system prompt, appending project review rules if any."""
  if not style_guide:
    return SYSTEM_PROMPT
  return f"{SYSTEM_PROMPT}\n\nProject review rules to apply:\n{style_guide}"


def build_user_prompt(filename: str, text: str, chunk: ReviewChunk | None = None) -> str:
  """Build the user payload for a whole file or one chunk of it."""
  if chunk is None:
    return f"File: {filename}\nContent:\n{text}\n"

  marker = f" (chunk {chunk.index}/{chunk.total_chunks})" if chunk.total_chunks > 1 else ""
  return f"File: {filename}{marker}\nChanges:\n{chunk.content}"
