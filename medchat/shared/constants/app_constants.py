"""
Application Constants
"""
from typing import Dict, FrozenSet, Set


class FileConstants:
    """Attachment upload constants."""

    # Extension allow-list for chat attachments
    ALLOWED_EXTENSIONS: FrozenSet[str] = frozenset({
        '.pdf',
        '.png',
        '.jpg',
        '.jpeg',
        '.txt',
        '.md',
        '.csv',
        '.doc',
        '.docx',
    })

    # Extensions whose decoded text is forwarded to the model
    TEXT_EXTENSIONS: FrozenSet[str] = frozenset({'.txt', '.md', '.csv'})

    CONTENT_TYPES: Dict[str, str] = {
        '.pdf': 'application/pdf',
        '.png': 'image/png',
        '.jpg': 'image/jpeg',
        '.jpeg': 'image/jpeg',
        '.txt': 'text/plain',
        '.md': 'text/markdown',
        '.csv': 'text/csv',
        '.doc': 'application/msword',
        '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    }

    # File size limits
    MAX_FILE_SIZE_MB: int = 10
    MAX_FILE_SIZE_BYTES: int = MAX_FILE_SIZE_MB * 1024 * 1024

    # Count ceiling per upload request and per message
    MAX_ATTACHMENTS: int = 10

    # File name constraints
    MAX_FILENAME_LENGTH: int = 255
    INVALID_FILENAME_CHARS: FrozenSet[str] = frozenset({'<', '>', ':', '"', '|', '?', '*', '\0', '/', '\\'})

    # Prompt budget for text attachments
    MAX_ATTACHMENT_TEXT_CHARS: int = 8000

    # Storage paths
    DEFAULT_STORAGE_PATH: str = "./uploads"


class ChatConstants:
    """Chat-related constants."""

    # Message limits
    MAX_MESSAGE_LENGTH: int = 10000

    # Session limits
    MAX_SESSION_TITLE_LENGTH: int = 200

    # Conversation window sent to the model
    HISTORY_WINDOW: int = 20

    # Response generation
    DEFAULT_MAX_TOKENS: int = 2048
    DEFAULT_TEMPERATURE: float = 0.4

    # History pagination
    DEFAULT_HISTORY_LIMIT: int = 50
    MAX_HISTORY_LIMIT: int = 200


class SpecialtyConstants:
    """Specialty selector constants."""

    DEFAULT_SPECIALTY: str = "general"

    SAFETY_DISCLAIMER: str = (
        "This information is educational and does not replace a consultation "
        "with a licensed healthcare professional. In an emergency, contact "
        "your local emergency number immediately."
    )


class RateLimitConstants:
    """Rate limiting constants."""

    DEFAULT_REQUESTS_PER_WINDOW: int = 30
    DEFAULT_WINDOW_SECONDS: int = 3600

    SUPPORTED_BACKENDS: Set[str] = {"database", "redis", "memory"}

    REDIS_KEY_PREFIX: str = "medchat:rate_limit:"


class DatabaseConstants:
    """Database-related constants."""

    # Connection pool
    MIN_POOL_SIZE: int = 5
    MAX_POOL_SIZE: int = 20
    POOL_TIMEOUT_SECONDS: int = 30
    DEFAULT_POOL_RECYCLE: int = 3600


class LoggingConstants:
    """Logging-related constants."""

    DEFAULT_LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    SUPPORTED_LOG_FORMATS: Set[str] = {"json", "text"}
    VALID_LOG_LEVELS: Set[str] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class EnvironmentConstants:
    """Environment and deployment constants."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    DEFAULT_ENVIRONMENT = DEVELOPMENT

    # Default values
    DEFAULT_HOST = "0.0.0.0"
    DEFAULT_PORT = 8000


class AIConstants:
    """Inference provider constants."""

    SUPPORTED_PROVIDERS: Set[str] = {"gemini", "openai"}
    DEFAULT_PROVIDER = "gemini"

    DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
    AVAILABLE_GEMINI_MODELS = [
        "gemini-2.0-flash",
        "gemini-2.5-flash",
        "gemini-2.5-pro",
    ]

    DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
    AVAILABLE_OPENAI_MODELS = [
        "gpt-4o-mini",
        "gpt-4o",
        "gpt-4-turbo",
    ]

    # Timeout Constants
    DEFAULT_TIMEOUT_SECONDS = 60.0
    DEFAULT_MAX_RETRIES = 3
