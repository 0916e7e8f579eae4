"""Configuration loader for the application."""

import os
from typing import Any, Dict, List, Optional
import yaml
from dotenv import load_dotenv, find_dotenv

from artifact_sync.models.state import SyncSettings

# Load environment variables from .env file in project root
dotenv_path = find_dotenv(usecwd=True)
if dotenv_path:
    load_dotenv(dotenv_path)
else:
    # Fallback: try loading from current directory
    load_dotenv()


class Config:
    """Application configuration manager."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to config.yaml. When omitted, ./config.yaml and
                then ./config.example.yaml are tried, and built-in defaults
                apply if neither exists.
        """
        explicit = config_path is not None
        if config_path is None:
            config_path = os.path.join(os.getcwd(), "config.yaml")

        if not os.path.exists(config_path):
            # Try config.example.yaml
            example_path = config_path.replace("config.yaml", "config.example.yaml")
            if os.path.exists(example_path):
                config_path = example_path
            elif explicit:
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            else:
                config_path = None

        self.path = config_path
        self._config: Dict[str, Any] = {}
        if config_path is not None:
            with open(config_path, "r") as f:
                self._config = yaml.safe_load(f) or {}

        # Substitute environment variables
        self._config = self._substitute_env_vars(self._config)

    def _substitute_env_vars(self, obj: Any) -> Any:
        """Recursively substitute ${ENV_VAR} patterns with environment variables."""
        if isinstance(obj, dict):
            return {k: self._substitute_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            # Replace ${VAR_NAME} with environment variable
            if obj.startswith("${") and obj.endswith("}"):
                var_name = obj[2:-1]
                return os.getenv(var_name, "")
            return obj
        return obj

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-separated key.

        Args:
            key: Dot-separated key (e.g., "sync.remote")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_all(self) -> Dict[str, Any]:
        """Get complete configuration dictionary."""
        return self._config

    # Convenience properties

    @property
    def artifacts(self) -> List[str]:
        return list(self.get("sync.artifacts", []) or [])

    @property
    def commit_message(self) -> str:
        return self.get("sync.commit_message", "Update generated artifacts")

    @property
    def max_push_attempts(self) -> int:
        return int(self.get("sync.max_push_attempts", 3))

    @property
    def remote(self) -> str:
        return self.get("sync.remote", "origin")

    @property
    def process_timeout(self) -> Optional[float]:
        timeout = self.get("sync.process_timeout")
        return float(timeout) if timeout else None

    @property
    def committer_name(self) -> str:
        return self.get("git.committer_name", "artifact-sync")

    @property
    def committer_email(self) -> str:
        return self.get("git.committer_email", "artifact-sync@users.noreply.github.com")

    @property
    def github_token(self) -> str:
        # Optional: without a token PR comments are skipped
        return self.get("github.token") or os.getenv("GITHUB_TOKEN", "")

    @property
    def github_api_url(self) -> str:
        return self.get("github.api_url", "https://api.github.com")

    @property
    def comment_label(self) -> str:
        return self.get("github.comment_label", "artifact-sync")

    @property
    def development_mode(self) -> bool:
        return self.get("development.debug", False)

    def sync_settings(self, **overrides: Any) -> SyncSettings:
        """
        Build the settings value handed to the orchestrator.

        Args:
            **overrides: Values taking precedence (e.g. from CLI flags);
                None values are ignored
        """
        settings = {
            "artifacts": self.artifacts,
            "commit_message": self.commit_message,
            "committer_name": self.committer_name,
            "committer_email": self.committer_email,
            "remote": self.remote,
            "max_push_attempts": self.max_push_attempts,
            "github_token": self.github_token,
            "github_api_url": self.github_api_url,
            "comment_label": self.comment_label,
            "process_timeout": self.process_timeout,
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return SyncSettings(**settings)


# Global config instance
_config: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """Get or create global configuration instance."""
    global _config
    if _config is None:
        _config = Config(config_path)
    return _config
