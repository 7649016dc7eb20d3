"""
Language Model (LLM) client configuration.

This module provides:
- The closed set of supported chat-completion providers
- A factory building the LangChain chat model for the configured provider
- A lazily created, process-wide chat model instance
"""
import logging
from enum import Enum
from typing import Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import AzureChatOpenAI, ChatOpenAI

from interview_assistant.core.config import Settings, settings
from interview_assistant.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    GITHUB = "github"
    AZURE_OPENAI = "azureopenai"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LLMProvider":
        """Case-insensitive lookup; unknown values fall back to GitHub Models."""
        normalized = (value or "").strip().lower()
        for provider in cls:
            if provider.value == normalized:
                return provider
        if normalized:
            logger.warning(f"Unknown AI provider '{value}', falling back to {cls.GITHUB.value}")
        return cls.GITHUB


def _create_github_model(config: Settings) -> BaseChatModel:
    if not config.GITHUB_TOKEN:
        raise ConfigurationError("GITHUB_TOKEN is not configured.")
    return ChatOpenAI(
        model=config.AI_MODEL,
        base_url=config.AI_ENDPOINT,
        api_key=config.GITHUB_TOKEN,
        temperature=config.LLM_TEMPERATURE,
        top_p=config.LLM_TOP_P,
        max_tokens=config.LLM_MAX_TOKENS,
    )


def _create_azure_model(config: Settings) -> BaseChatModel:
    if not config.AZURE_OPENAI_API_KEY:
        raise ConfigurationError("AZURE_OPENAI_API_KEY is not configured.")
    if not config.AZURE_OPENAI_ENDPOINT:
        raise ConfigurationError("AZURE_OPENAI_ENDPOINT is not configured.")
    return AzureChatOpenAI(
        azure_deployment=config.AZURE_OPENAI_DEPLOYMENT,
        azure_endpoint=config.AZURE_OPENAI_ENDPOINT,
        api_key=config.AZURE_OPENAI_API_KEY,
        api_version=config.AZURE_OPENAI_API_VERSION,
        temperature=config.LLM_TEMPERATURE,
        top_p=config.LLM_TOP_P,
        max_tokens=config.LLM_MAX_TOKENS,
    )


_FACTORIES = {
    LLMProvider.GITHUB: _create_github_model,
    LLMProvider.AZURE_OPENAI: _create_azure_model,
}


def create_chat_model(config: Settings = settings) -> BaseChatModel:
    """Build the chat model for the configured provider."""
    provider = LLMProvider.parse(config.AI_PROVIDER)
    logger.info(f"Creating chat model for provider '{provider.value}'")
    return _FACTORIES[provider](config)


# Singleton chat model shared by the interview agent and the report synthesizer
_chat_model: Optional[BaseChatModel] = None

def get_chat_model() -> BaseChatModel:
    """Get or create the process-wide chat model instance."""
    global _chat_model
    if _chat_model is None:
        _chat_model = create_chat_model(settings)
    return _chat_model
