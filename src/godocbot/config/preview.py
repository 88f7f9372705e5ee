"""Preview workload settings (images and tunnel endpoint)."""

from __future__ import annotations

from godocbot.domain.preview.workload import DEFAULT_PREVIEW_SETTINGS, PreviewSettings

from .env import env_int, optional_env


def _env_str(name: str, default: str) -> str:
    value = optional_env(name)
    return default if value is None else value


def get_preview_settings() -> PreviewSettings:
    defaults = DEFAULT_PREVIEW_SETTINGS
    return PreviewSettings(
        godoc_image=_env_str("GODOCBOT_GODOC_IMAGE", defaults.godoc_image),
        tunnel_image=_env_str("GODOCBOT_TUNNEL_IMAGE", defaults.tunnel_image),
        tunnel_host=_env_str("GODOCBOT_TUNNEL_HOST", defaults.tunnel_host),
        local_port=env_int("GODOCBOT_GODOC_PORT", defaults.local_port),
        image_pull_policy=_env_str("GODOCBOT_IMAGE_PULL_POLICY", defaults.image_pull_policy),
    )
