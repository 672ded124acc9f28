"""Configuration management for the Ester chat client."""

from __future__ import annotations

import os
from typing import Any

import yaml
from dotenv import load_dotenv

from ester.llm.models import ProviderConfig

DEFAULT_COMMIT_ID = "local-development"


class Configuration:
    """Manages configuration and environment variables for the chat client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self.config_path = config_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        self._config = self._load_yaml_config(self.config_path)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @property
    def commit_id(self) -> str:
        """Build identifier attached to request metadata."""
        return os.getenv("COMMIT_ID") or DEFAULT_COMMIT_ID

    def get_llm_config(self) -> dict[str, Any]:
        """Get LLM request configuration from YAML.

        Returns:
            LLM configuration dictionary.

        Raises:
            ValueError: If a required parameter is missing.
        """
        llm_config = self._config.get("llm", {})

        required_keys = ["base_url", "model", "temperature", "max_tokens"]
        for key in required_keys:
            if key not in llm_config:
                raise ValueError(
                    f"Required LLM configuration parameter '{key}' not found. "
                    "All LLM parameters must be explicitly configured."
                )

        return llm_config

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client timeouts for the LLM API.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If a timeout is missing or not positive.
        """
        http_config = self.get_llm_config().get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured "
                    "in config.yaml under llm.http_client"
                )
            if http_config[key] <= 0:
                raise ValueError(f"http_client.{key} must be positive")

        return http_config

    def get_prompt_config(self) -> dict[str, str]:
        """Get system prompt and instructions text.

        Raises:
            ValueError: If either text is missing.
        """
        prompt_config = self._config.get("prompt", {})
        for key in ("system_prompt", "instructions"):
            if not prompt_config.get(key):
                raise ValueError(
                    f"prompt.{key} must be explicitly configured in config.yaml"
                )
        return {
            "system_prompt": prompt_config["system_prompt"].strip(),
            "instructions": prompt_config["instructions"].strip(),
        }

    def get_streaming_config(self) -> dict[str, Any]:
        """Get streaming configuration from YAML."""
        streaming_config = self._config.get("streaming", {})
        return {"log_events": bool(streaming_config.get("log_events", False))}

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        logging_config = self._config.get("logging", {})
        return {"level": str(logging_config.get("level", "INFO")).upper()}

    def provider_config(self, api_key: str | None = None) -> ProviderConfig:
        """Build the provider configuration used by ``ResponsesClient``.

        The key stored here is the process-wide default; an empty key is
        allowed because callers may supply their own per request.
        """
        if api_key is None:
            api_key = os.getenv("OPENAI_API_KEY", "")
        llm_config = self.get_llm_config()
        http_config = self.get_http_client_config()
        prompt_config = self.get_prompt_config()

        return ProviderConfig(
            base_url=llm_config["base_url"],
            model=llm_config["model"],
            api_key=api_key,
            temperature=float(llm_config["temperature"]),
            max_tokens=int(llm_config["max_tokens"]),
            connect_timeout=float(http_config["connect_timeout"]),
            read_timeout=float(http_config["read_timeout"]),
            write_timeout=float(http_config["write_timeout"]),
            pool_timeout=float(http_config["pool_timeout"]),
            instructions=prompt_config["instructions"],
            system_prompt=prompt_config["system_prompt"],
            commit_id=self.commit_id,
            log_events=self.get_streaming_config()["log_events"],
        )
