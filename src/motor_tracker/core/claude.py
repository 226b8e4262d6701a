"""Anthropic Claude API wrapper."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import anthropic

from .errors import InsightUnavailableError

if TYPE_CHECKING:
    from .config import ClaudeConfig

logger = logging.getLogger(__name__)


class ClaudeClient:
    """Wrapper for Anthropic Claude API."""

    def __init__(self, config: ClaudeConfig | None = None) -> None:
        """Initialize Claude client."""
        if config is None:
            from .config import get_settings

            config = get_settings().claude

        self.config = config
        self._client: anthropic.Anthropic | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    @property
    def client(self) -> anthropic.Anthropic:
        """Get or create Anthropic client."""
        if self._client is None:
            if not self.config.api_key:
                raise InsightUnavailableError(
                    "Anthropic API key not set. "
                    "Set ANTHROPIC_API_KEY environment variable or configure in settings."
                )
            self._client = anthropic.Anthropic(api_key=self.config.api_key)
        return self._client

    def complete(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Generate completion from Claude."""
        messages = [{"role": "user", "content": prompt}]

        kwargs = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "messages": messages,
        }

        if system:
            kwargs["system"] = system

        if temperature is not None:
            kwargs["temperature"] = temperature
        else:
            kwargs["temperature"] = self.config.temperature

        logger.debug("Requesting completion from %s", self.config.model)
        response = self.client.messages.create(**kwargs)

        # Extract text from response
        text_parts = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)

        return "\n".join(text_parts)


# Global client instance
_client: ClaudeClient | None = None


def get_claude_client() -> ClaudeClient:
    """Get or create global Claude client."""
    global _client
    if _client is None:
        _client = ClaudeClient()
    return _client
