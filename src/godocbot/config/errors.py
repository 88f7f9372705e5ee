"""Errors raised while reading settings from the environment."""

from __future__ import annotations

from godocbot.domain.errors import GodocbotError


class ConfigurationError(GodocbotError):
    """The process cannot start with the given environment."""


class MissingConfigurationError(ConfigurationError):
    """A required setting is absent or blank."""


class InvalidConfigurationError(ConfigurationError):
    """A setting is present but cannot be interpreted."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected})")
        self.name = name
        self.value = value
