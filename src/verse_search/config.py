"""Centralized configuration for verse-search using Pydantic Settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from verse_search.search.accents import SearchConfig, parse_config


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    The accent directive is parsed while the settings are validated, so a
    malformed directive fails at startup instead of in the middle of a search.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Remote store
    graphql_url: str = Field(
        default="http://127.0.0.1:4000/graphql", description="GraphQL endpoint serving the docSet store"
    )
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")
    http_retries: int = Field(default=0, ge=0, description="Connection retries performed by the HTTP transport")

    # Search behaviour
    search_accents_to_remove: str = Field(
        default="",
        description=r"Accent directive: 'X>Y' equivalences, '\uXXXX' or '\uXXXX-\uYYYY' ignored code points",
    )
    search_whole_words: bool = Field(default=False, description="Match whole words by default")
    search_batch_size: int = Field(default=50, ge=1, description="Candidates pulled per provider read")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("search_accents_to_remove")
    @classmethod
    def _check_accent_directive(cls, value: str) -> str:
        # AccentDirectiveError is a ValueError, surfaced as a ValidationError
        parse_config(value)
        return value

    def search_config(self) -> SearchConfig:
        """Get the ignore set and equivalence classes parsed from the directive."""
        return parse_config(self.search_accents_to_remove)
