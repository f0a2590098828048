"""Application configuration."""

from typing import Literal
from urllib.parse import quote

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# iron-session compatible minimum; shorter secrets are rejected at startup
MIN_COOKIE_SECRET_LENGTH = 32

DEVELOPMENT_COOKIE_SECRET = "development-secret-key-min-32-chars!!"

LOOPBACK_HOSTS = ("localhost", "127.0.0.1", "[::1]")


class DatabaseSettings(BaseModel):
    """Database configuration."""

    # In-memory by default: flow and session state do not survive a restart
    url: str = "sqlite+aiosqlite:///:memory:"


class SessionSettings(BaseModel):
    """Browser session cookie configuration."""

    cookie_name: str = "sid"
    ttl_days: int = 14

    # When True, logout also deletes the stored OAuth credential for the subject
    forget_session_on_logout: bool = False


class OAuthSettings(BaseModel):
    """AT Protocol OAuth client configuration."""

    client_name: str = "AT Protocol Demo App"
    scope: str = "atproto transition:generic"

    # Set by Settings validator from host/port
    client_id: str = ""
    client_uri: str = ""
    redirect_uri: str = ""


class APISettings(BaseModel):
    """API configuration."""

    host: str
    port: int
    protocol: Literal["http", "https"]

    @computed_field
    @property
    def is_loopback(self) -> bool:
        """Whether the server only listens on a loopback address."""
        return self.host in LOOPBACK_HOSTS

    @computed_field
    @property
    def base_url(self) -> str:
        """Construct base URL from host.

        AT Protocol loopback clients must redirect to 127.0.0.1 rather than
        "localhost", so local development always uses the IP literal.
        In development: http://127.0.0.1:3000
        In production: https://demo.example.com
        """
        if self.is_loopback:
            return f"http://127.0.0.1:{self.port}"
        return f"{self.protocol}://{self.host}"


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    logfire_token: str | None = None

    # If None, sends when a token is present
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override:

    Development (default):
        PORT=3000
        COOKIE_SECRET=<at least 32 characters>
        -> API: http://127.0.0.1:3000
        -> OAuth client id: http://localhost?redirect_uri=...&scope=...

    Production:
        HOST=demo.example.com
        ENVIRONMENT=production
        -> API: https://demo.example.com
        -> OAuth client id: https://demo.example.com/oauth-client-metadata.json
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows DATABASE__URL syntax
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    host: str = "127.0.0.1"
    port: int = 3000

    cookie_secret: str = Field(default=DEVELOPMENT_COOKIE_SECRET, repr=False)

    # Nested settings
    database: DatabaseSettings = DatabaseSettings()
    session: SessionSettings = SessionSettings()
    oauth: OAuthSettings = OAuthSettings()
    api: APISettings = APISettings(
        host="127.0.0.1", port=3000, protocol="http"
    )  # Overwritten in validator
    observability: ObservabilitySettings = ObservabilitySettings()

    @field_validator("cookie_secret")
    @classmethod
    def validate_cookie_secret(cls, v: str) -> str:
        """Refuse to start with a secret too short to protect the cookie."""
        if len(v) < MIN_COOKIE_SECRET_LENGTH:
            raise ValueError(
                f"cookie_secret must be at least {MIN_COOKIE_SECRET_LENGTH} characters"
            )
        return v

    @model_validator(mode="after")
    def initialize_api_settings(self) -> "Settings":
        """Initialize API and OAuth client settings from host and environment."""
        protocol: Literal["http", "https"] = (
            "http" if self.environment in ("test", "development") else "https"
        )

        self.api = APISettings(host=self.host, port=self.port, protocol=protocol)

        base_url = self.api.base_url
        self.oauth.redirect_uri = f"{base_url}/oauth/callback"
        self.oauth.client_uri = base_url

        if self.api.is_loopback:
            # Loopback clients have no hosted metadata document
            self.oauth.client_id = (
                f"http://localhost?redirect_uri={quote(self.oauth.redirect_uri, safe='')}"
                f"&scope={quote(self.oauth.scope, safe='')}"
            )
        else:
            self.oauth.client_id = f"{base_url}/oauth-client-metadata.json"

        return self

    @property
    def database_url(self) -> str:
        """Shortcut for the database URL."""
        return self.database.url

    @property
    def is_production(self) -> bool:
        """Whether cookies must be marked Secure."""
        return self.environment in ("staging", "production")
