"""
AI advisor route: forwards chat turns to the Anthropic Messages API.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from portfolio_engine.api.errors import APIError, translate_upstream_error
from portfolio_engine.config import Settings, get_settings_dep
from portfolio_engine.logging import get_logger
from portfolio_engine.upstream.chat import AnthropicChatClient

router = APIRouter(prefix="/api/ai", tags=["AI Advisor"])
logger = get_logger(__name__)

_chat_client: AnthropicChatClient | None = None


def get_chat_client(settings: Settings = Depends(get_settings_dep)) -> AnthropicChatClient:
    """Get or create Anthropic client singleton."""
    global _chat_client
    if _chat_client is None:
        _chat_client = AnthropicChatClient(settings, logger)
    else:
        _chat_client.update_settings(settings)
    return _chat_client


class ChatRequest(BaseModel):
    """Advisor chat request from the dashboard."""

    messages: list[dict[str, Any]] = Field(default_factory=list)
    system: str | list[dict[str, Any]] | None = None


@router.post("/chat", response_model=None)
async def chat(
    request: ChatRequest,
    client: AnthropicChatClient = Depends(get_chat_client),
) -> dict[str, Any]:
    """Send the conversation to the advisor model and return its reply verbatim."""
    if not client.is_configured:
        raise APIError(500, "ANTHROPIC_API_KEY not configured")

    try:
        return await client.chat(request.messages, system=request.system)
    except Exception as e:
        raise translate_upstream_error(
            e, api_error="Anthropic API error", failure="Failed to get AI response"
        ) from e
