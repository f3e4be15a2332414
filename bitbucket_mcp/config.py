"""Configuration loading from YAML and environment.

Credentials are taken from environment variables or from files (Docker
secrets). Never put a real app password in a config file committed to the
repo.
"""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bitbucket_mcp.errors import ConfigError

_REPO_URL_RE = re.compile(r"^(?:https?://[^/]+/)?([^/\s]+)/([^/\s]+?)(?:\.git)?/?$")


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so secret lookups can read env/file
_current_env: dict[str, str] = {}


class BitbucketConfig(BaseSettings):
    """Bitbucket credentials, target repository and request limits."""

    model_config = SettingsConfigDict(env_prefix="BITBUCKET_", extra="ignore", frozen=True)

    username: str | None = Field(default=None, description="Account (or workspace) username")
    password: str | None = Field(default=None, description="App password; use env or secret file")
    url: str | None = Field(
        default=None,
        description="Repository address, e.g. https://bitbucket.org/workspace/repo",
    )
    api_url: str = Field(default="https://api.bitbucket.org/2.0", description="API base URL")
    request_timeout: float = Field(default=30, gt=0, description="Timeout per HTTP request, seconds")
    operation_timeout: float = Field(
        default=120,
        gt=0,
        description="Upper bound for one batch of concurrent sub-fetches, seconds",
    )
    max_workers: int = Field(default=8, ge=1, le=64, description="Concurrent sub-fetches per batch")
    max_commit_pages: int = Field(default=10, ge=1, description="Pages of PR commits to follow")

    @property
    def repository_path(self) -> str:
        """Return "workspace/repo" parsed from url.

        Raises ConfigError if url is missing or not a repository address.
        """
        if not self.url:
            raise ConfigError("BITBUCKET_URL is required")
        match = _REPO_URL_RE.match(self.url.strip())
        if not match:
            raise ConfigError(f"BITBUCKET_URL is not a repository address: {self.url}")
        return f"{match.group(1)}/{match.group(2)}"


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class ServerConfig(BaseSettings):
    """MCP server identity and transport."""

    model_config = SettingsConfigDict(env_prefix="MCP_", extra="ignore")

    name: str = Field(default="mcp-bitbucket", description="Server name announced to clients")
    transport: str = Field(default="stdio", description="stdio, sse or streamable-http")


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore", frozen=True)

    bitbucket: BitbucketConfig = Field(default_factory=BitbucketConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    def validate_required(self) -> None:
        """Raise ConfigError naming every missing required setting.

        The process must not serve tools without complete credentials and a
        parseable repository address.
        """
        missing = [
            env_name
            for env_name, value in (
                ("BITBUCKET_USERNAME", self.bitbucket.username),
                ("BITBUCKET_PASSWORD", self.bitbucket.password),
                ("BITBUCKET_URL", self.bitbucket.url),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
        # Parses url; raises ConfigError when malformed
        self.bitbucket.repository_path


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Environment wins over YAML for credentials. The password may also come
    from BITBUCKET_PASSWORD_FILE. The result is not validated; call
    AppConfig.validate_required() before serving.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    raw: dict[str, Any] = {}
    path = config_path or Path("config.yaml")
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
        raw = _substitute_env(raw)

    # Unresolved ${VAR} placeholders count as unset
    bitbucket_raw = {
        k: v for k, v in (raw.get("bitbucket") or {}).items() if not (isinstance(v, str) and v.startswith("$"))
    }
    for key in ("username", "url"):
        env_value = _current_env.get(f"BITBUCKET_{key.upper()}")
        if env_value:
            bitbucket_raw[key] = env_value
    password = _read_secret("BITBUCKET_PASSWORD", "BITBUCKET_PASSWORD_FILE")
    if password:
        bitbucket_raw["password"] = password

    return AppConfig(
        bitbucket=BitbucketConfig(**bitbucket_raw),
        logging=LoggingConfig(**(raw.get("logging") or {})),
        server=ServerConfig(**(raw.get("server") or {})),
    )
