"""Application configuration helpers."""

from __future__ import annotations

from .controller import ControllerConfig, get_controller_config
from .env import env_bool, env_float, env_int, optional_env
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .github import GitHubConfig, get_github_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .kubernetes import KubernetesConfig, get_kubernetes_config
from .logging import configure_logging, resolve_log_level
from .preview import get_preview_settings

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "ControllerConfig",
    "GitHubConfig",
    "InvalidConfigurationError",
    "KubernetesConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "get_controller_config",
    "get_github_config",
    "get_kubernetes_config",
    "get_preview_settings",
    "optional_env",
    "resolve_log_level",
]
