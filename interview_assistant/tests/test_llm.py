import pytest
from langchain_openai import AzureChatOpenAI, ChatOpenAI

from interview_assistant.core.config import Settings
from interview_assistant.core.exceptions import ConfigurationError
from interview_assistant.core.llm import LLMProvider, create_chat_model


@pytest.mark.parametrize("value, expected", [
    ("github", LLMProvider.GITHUB),
    ("GitHub", LLMProvider.GITHUB),
    ("AzureOpenAI", LLMProvider.AZURE_OPENAI),
    (" azureopenai ", LLMProvider.AZURE_OPENAI),
    ("anthropic", LLMProvider.GITHUB),
    ("", LLMProvider.GITHUB),
    (None, LLMProvider.GITHUB),
])
def test_provider_parsing(value, expected):
    assert LLMProvider.parse(value) == expected


def test_github_provider_builds_openai_compatible_client():
    config = Settings(AI_PROVIDER="github", GITHUB_TOKEN="test-token", AI_MODEL="gpt-4o-mini")

    model = create_chat_model(config)

    assert isinstance(model, ChatOpenAI)
    assert model.model_name == "gpt-4o-mini"


def test_azure_provider_builds_azure_client():
    config = Settings(
        AI_PROVIDER="AzureOpenAI",
        AZURE_OPENAI_API_KEY="test-key",
        AZURE_OPENAI_ENDPOINT="https://example.openai.azure.com",
    )

    assert isinstance(create_chat_model(config), AzureChatOpenAI)


def test_missing_credentials_are_a_configuration_error():
    with pytest.raises(ConfigurationError):
        create_chat_model(Settings(AI_PROVIDER="github", GITHUB_TOKEN=""))

    with pytest.raises(ConfigurationError):
        create_chat_model(Settings(AI_PROVIDER="azureopenai", AZURE_OPENAI_API_KEY="key", AZURE_OPENAI_ENDPOINT=""))
