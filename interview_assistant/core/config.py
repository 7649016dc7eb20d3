from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from dotenv import load_dotenv



# Get the path to the .env file
CONFIG_DIR = Path(__file__).resolve().parent
# .env lives in the project root (two levels up from interview_assistant/core)
PROJECT_ROOT = CONFIG_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT / '.env'

# Load environment variables from .env file
load_dotenv(ENV_FILE_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding='utf-8',
        extra='ignore'
    )


    DEBUG_MODE: bool = False

    # LLM Provider ("github" or "azureopenai"; anything else falls back to github)
    AI_PROVIDER: str = "github"
    AI_MODEL: str = "gpt-4o"
    AI_ENDPOINT: str = "https://models.inference.ai.azure.com"

    GITHUB_TOKEN: str = ""
    AZURE_OPENAI_API_KEY: str = ""
    AZURE_OPENAI_ENDPOINT: str = ""
    AZURE_OPENAI_DEPLOYMENT: str = "gpt-4"
    AZURE_OPENAI_API_VERSION: str = "2024-10-21"

    # Sampling
    LLM_TEMPERATURE: float = 0.7
    LLM_TOP_P: float = 0.95
    LLM_MAX_TOKENS: int = 2000

    # Shared API key pacing: minimum seconds between LLM requests (process-wide)
    MIN_REQUEST_INTERVAL_SECONDS: float = 60.0

    # Agent Configuration
    MAX_TOOL_ROUNDS: int = 3
    REPORT_TIMEOUT_SECONDS: float = 120.0

    # Document Fetching
    FETCH_TIMEOUT_SECONDS: float = 30.0
    MAX_REDIRECTS: int = 5

    # Retry Configuration
    FETCH_RETRY_ATTEMPTS: int = 3
    RETRY_BASE_DELAY: float = 1.0
    RETRY_MAX_DELAY: float = 10.0

    # Input Limits
    MAX_MESSAGE_LENGTH: int = 1000
    MAX_URL_LENGTH: int = 2000

    # Session Storage
    SESSION_DB_PATH: str = str(PROJECT_ROOT / "data" / "sessions.sqlite3")

    # Logging
    LOG_JSON: bool = False


# Initialize settings
settings = Settings()
