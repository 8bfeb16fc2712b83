"""Shared Anthropic API client and model configuration."""

import os

from anthropic import AsyncAnthropic
from dotenv import load_dotenv

MODEL = "claude-sonnet-4-5-20250929"

_client: AsyncAnthropic | None = None


def get_model() -> str:
    """Model name, overridable with ``FIREREPORT_MODEL``."""
    return os.environ.get("FIREREPORT_MODEL") or MODEL


def get_client() -> AsyncAnthropic:
    """Get or create a shared Anthropic client (module-level singleton)."""
    global _client
    if _client is None:
        load_dotenv()
        _client = AsyncAnthropic(api_key=os.environ.get("ANTHROPIC_API_KEY", ""))
    return _client
