"""
Configuration management for the Writing Assistant.
"""

import os
from typing import Dict, Any, Optional
from pathlib import Path
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_DOCUMENT_GOAL = "Research paper on the enlightenment"
DEFAULT_DOCUMENT_CONTEXT = (
    "The Age of Enlightenment, also known as the Age of Reason, was an intellectual and "
    "philosophical movement that dominated the world of ideas in Europe during the 17th "
    "and 18th centuries."
)


class LLMConfig(BaseModel):
    """Configuration for LLM integration."""
    model: str = Field(default="gpt-4o")
    api_key: Optional[str] = None
    api_base: str = "https://api.openai.com/v1"
    max_tokens: int = 800
    temperature: float = 0.7
    timeout: int = 60

    class Config:
        # from_env() overrides go through the validators too
        validate_assignment = True

    @validator('api_key', always=True)
    def validate_api_key(cls, v):
        # Defer hard validation to runtime LLM calls so the app can boot without a key
        if v:
            return v
        return os.getenv('OPENAI_API_KEY') or None

    @validator('model')
    def validate_model(cls, v):
        if not v:
            v = os.getenv('OPENAI_MODEL', 'gpt-4o')
        return v


class ComposerConfig(BaseModel):
    """Configuration for the notes composer and its AI calls."""
    ai_backend: str = "openai"  # openai | canned
    brainstorm_format: str = "text"  # text | json
    insert_position: str = "end"  # end (newest-last) | start (newest-first)
    brainstorm_temperature: float = 0.7
    brainstorm_max_tokens: int = 800
    search_query_temperature: float = 0.3
    search_query_max_tokens: int = 50
    web_results_temperature: float = 0.7
    web_results_max_tokens: int = 600
    web_result_count: int = 3
    default_document_goal: str = DEFAULT_DOCUMENT_GOAL
    default_document_context: str = DEFAULT_DOCUMENT_CONTEXT

    class Config:
        validate_assignment = True

    @validator('ai_backend')
    def validate_ai_backend(cls, v):
        if v not in ("openai", "canned"):
            raise ValueError(f"Unknown ai_backend: {v}")
        return v

    @validator('brainstorm_format')
    def validate_brainstorm_format(cls, v):
        if v not in ("text", "json"):
            raise ValueError(f"Unknown brainstorm_format: {v}")
        return v

    @validator('insert_position')
    def validate_insert_position(cls, v):
        if v not in ("end", "start"):
            raise ValueError(f"Unknown insert_position: {v}")
        return v


class StorageConfig(BaseModel):
    """Configuration for key-value persistence of notes and the document goal."""
    backend: str = "file"  # memory | file | redis
    file_path: Path = Path("./data/composer.json")
    redis_url: str = "redis://localhost:6379"
    redis_db: int = 0
    key_prefix: str = "writing-assistant:"

    class Config:
        validate_assignment = True

    @validator('backend')
    def validate_backend(cls, v):
        if v not in ("memory", "file", "redis"):
            raise ValueError(f"Unknown storage backend: {v}")
        return v


class WebConfig(BaseModel):
    """Configuration for web application."""
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    secret_key: Optional[str] = None
    max_content_length: int = 2 * 1024 * 1024  # 2MB
    cors_allowed_origins: str = "*"

    class Config:
        validate_assignment = True

    @validator('secret_key', always=True)
    def validate_secret_key(cls, v):
        if not v:
            v = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
        return v


class AppConfig(BaseSettings):
    """Main application configuration."""
    llm: LLMConfig = Field(default_factory=LLMConfig)
    composer: ComposerConfig = Field(default_factory=ComposerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        env_prefix = 'WRITING_ASSISTANT_'
        extra = 'ignore'

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Create configuration from environment variables."""
        config = cls()

        if os.getenv('OPENAI_API_KEY'):
            config.llm.api_key = os.getenv('OPENAI_API_KEY')

        if os.getenv('OPENAI_MODEL'):
            config.llm.model = os.getenv('OPENAI_MODEL')

        if os.getenv('WRITING_ASSISTANT_AI_BACKEND'):
            config.composer.ai_backend = os.getenv('WRITING_ASSISTANT_AI_BACKEND')

        if os.getenv('WRITING_ASSISTANT_BRAINSTORM_FORMAT'):
            config.composer.brainstorm_format = os.getenv('WRITING_ASSISTANT_BRAINSTORM_FORMAT')

        if os.getenv('WRITING_ASSISTANT_INSERT_POSITION'):
            config.composer.insert_position = os.getenv('WRITING_ASSISTANT_INSERT_POSITION')

        if os.getenv('WRITING_ASSISTANT_DEFAULT_GOAL'):
            config.composer.default_document_goal = os.getenv('WRITING_ASSISTANT_DEFAULT_GOAL')

        for key_env, attr, cast in [
            ('WRITING_ASSISTANT_BRAINSTORM_MAX_TOKENS', 'brainstorm_max_tokens', int),
            ('WRITING_ASSISTANT_BRAINSTORM_TEMPERATURE', 'brainstorm_temperature', float),
            ('WRITING_ASSISTANT_WEB_RESULT_COUNT', 'web_result_count', int),
        ]:
            if os.getenv(key_env):
                try:
                    setattr(config.composer, attr, cast(os.getenv(key_env)))
                except ValueError:
                    pass

        if os.getenv('WRITING_ASSISTANT_STORAGE_BACKEND'):
            config.storage.backend = os.getenv('WRITING_ASSISTANT_STORAGE_BACKEND')

        if os.getenv('WRITING_ASSISTANT_STORAGE_PATH'):
            config.storage.file_path = Path(os.getenv('WRITING_ASSISTANT_STORAGE_PATH'))

        if os.getenv('REDIS_URL'):
            config.storage.redis_url = os.getenv('REDIS_URL')

        if os.getenv('WRITING_ASSISTANT_PORT'):
            try:
                config.web.port = int(os.getenv('WRITING_ASSISTANT_PORT'))
            except ValueError:
                pass

        if os.getenv('WRITING_ASSISTANT_DEBUG'):
            config.web.debug = os.getenv('WRITING_ASSISTANT_DEBUG').lower() == 'true'

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> 'AppConfig':
        """Create configuration from YAML file."""
        import yaml

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        llm = self.llm.dict()
        web = self.web.dict()
        if not include_secrets:
            llm['api_key'] = bool(llm.get('api_key'))
            web.pop('secret_key', None)
        return {
            'llm': llm,
            'composer': self.composer.dict(),
            'storage': {
                **self.storage.dict(),
                'file_path': str(self.storage.file_path)
            },
            'web': web,
        }


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
