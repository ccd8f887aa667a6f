"""
Async Anthropic Messages API client backing the AI advisor.
"""

from typing import Any, cast

from portfolio_engine.config import Settings
from portfolio_engine.upstream.base import AsyncUpstreamClient
from portfolio_engine.upstream.errors import ConfigurationMissing

MESSAGES_PATH = "/messages"


class AnthropicChatClient(AsyncUpstreamClient):
    """
    Forwards advisor conversations to the Anthropic Messages API.

    Model and max_tokens come from settings; the caller supplies only the
    conversation and the system prompt.
    """

    service_name = "Anthropic"

    def _base_url_from(self, settings: Settings) -> str:
        return settings.anthropic_base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return self._settings.has_anthropic_key

    def _get_base_headers(self) -> dict[str, str]:
        if not self.is_configured:
            raise ConfigurationMissing(["ANTHROPIC_API_KEY"], service=self.service_name)
        return {
            "Content-Type": "application/json",
            "x-api-key": self._settings.anthropic_api_key.get_secret_value(),
            "anthropic-version": self._settings.anthropic_version,
        }

    async def chat(
        self,
        messages: list[dict[str, Any]],
        system: str | list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """
        Send one non-streaming Messages request.

        Args:
            messages: Conversation turns ({"role", "content"})
            system: Optional system prompt

        Returns:
            The Messages API response body
        """
        body: dict[str, Any] = {
            "model": self._settings.anthropic_model,
            "max_tokens": self._settings.anthropic_max_tokens,
            "messages": messages,
        }
        if system:
            body["system"] = system

        self._logger.info(
            "Advisor chat request: model=%s turns=%d",
            self._settings.anthropic_model,
            len(messages),
        )
        response = await self._request("POST", MESSAGES_PATH, json_body=body)
        return cast(dict[str, Any], response.json())
