"""Configuration management for the SSE streaming client."""

import os
from typing import Any

import httpx
import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")


class Configuration:
    """Manages configuration and environment variables for the streaming client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for the stream URL and auth token
        self._config_path = config_path or DEFAULT_CONFIG_PATH
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self._config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary.

        Returns:
            The complete configuration dictionary.
        """
        return self._config

    def get_streaming_config(self) -> dict[str, Any]:
        """Get the streaming section from YAML.

        Returns:
            Streaming configuration dictionary.
        """
        return self._config.get("streaming", {})

    @property
    def stream_url(self) -> str:
        """Get the stream URL, preferring SSE_STREAM_URL from the environment.

        Raises:
            ValueError: If no URL is configured anywhere.
        """
        url = os.getenv("SSE_STREAM_URL") or self.get_streaming_config().get("url")
        if not url:
            raise ValueError(
                "streaming.url must be configured in config.yaml "
                "or SSE_STREAM_URL set in the environment"
            )
        return url

    @property
    def auth_token(self) -> str | None:
        """Get the optional bearer token from SSE_AUTH_TOKEN."""
        return os.getenv("SSE_AUTH_TOKEN") or None

    def get_default_headers(self) -> dict[str, str]:
        """Get the headers sent with every streaming request.

        Returns:
            Header name to value mapping, including Authorization when a
            token is available.

        Raises:
            ValueError: If streaming.headers is not a mapping of strings.
        """
        headers = self.get_streaming_config().get("headers") or {}
        if not isinstance(headers, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
        ):
            raise ValueError("streaming.headers must map header names to strings")

        headers = dict(headers)
        if token := self.auth_token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client timeouts for the streaming connection.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required parameters are missing or invalid.
        """
        http_config = self.get_streaming_config().get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"streaming.http_client.{key} must be explicitly configured "
                    "in config.yaml"
                )

        for key in required_keys:
            value = http_config[key]
            # read_timeout may be null: streaming reads wait indefinitely
            if value is None and key == "read_timeout":
                continue
            if not isinstance(value, int | float) or value < 0:
                raise ValueError(
                    f"streaming.http_client.{key} must be a non-negative number"
                )

        return http_config

    def get_timeout(self) -> httpx.Timeout:
        """Build the httpx timeout for the streaming connection."""
        http_config = self.get_http_client_config()
        return httpx.Timeout(
            connect=http_config["connect_timeout"],
            read=http_config["read_timeout"],
            write=http_config["write_timeout"],
            pool=http_config["pool_timeout"],
        )

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._config.get("logging", {})
