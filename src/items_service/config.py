"""
Configuration settings for the Items Service.

Uses pydantic-settings for type-safe configuration management with
environment variable support.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    """AWS-specific configuration settings."""

    model_config = SettingsConfigDict(extra="ignore")

    # Use explicit env var names to avoid capturing Lambda's temporary credentials
    region: str = Field(default="us-east-1", alias="AWS_DEFAULT_REGION")
    access_key_id: str | None = Field(default=None, alias="ITEMS_AWS_ACCESS_KEY_ID")
    secret_access_key: str | None = Field(default=None, alias="ITEMS_AWS_SECRET_ACCESS_KEY")


class DynamoDBSettings(BaseSettings):
    """DynamoDB configuration."""

    model_config = SettingsConfigDict(env_prefix="DYNAMODB_", extra="ignore")

    table_name: str = Field(default="items", description="DynamoDB table name")
    primary_key: str = Field(default="itemId", description="Partition key attribute name")
    endpoint_url: str | None = Field(
        default=None,
        description="Override endpoint, e.g. http://localhost:8000 for DynamoDB Local",
    )
    escape_reserved_words: bool = Field(
        default=False,
        description="Alias reserved field names through ExpressionAttributeNames",
    )
    max_attempts: int = Field(default=3, description="Attempts for throttled requests")
    read_capacity: int = Field(default=5, description="Read capacity units")
    write_capacity: int = Field(default=5, description="Write capacity units")

    @field_validator("primary_key")
    @classmethod
    def validate_primary_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Primary key attribute name must not be empty")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be at least 1")
        return v


class Settings(BaseSettings):
    """Main application settings aggregating all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")

    # Nested settings
    aws: AWSSettings = Field(default_factory=AWSSettings)
    dynamodb: DynamoDBSettings = Field(default_factory=DynamoDBSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
