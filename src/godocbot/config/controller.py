"""Controller loop settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int, optional_env

DEFAULT_SYNC_INTERVAL_SECONDS = 30.0
DEFAULT_WORKERS = 2


@dataclass(frozen=True, slots=True)
class ControllerConfig:
    enable_pr_sync: bool = False
    sync_interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS
    workers: int = DEFAULT_WORKERS
    # ``None`` watches every namespace.
    namespace: str | None = None
    install_crds: bool = False


def get_controller_config() -> ControllerConfig:
    return ControllerConfig(
        enable_pr_sync=env_bool("GODOCBOT_ENABLE_PR_SYNC"),
        sync_interval_seconds=env_float(
            "GODOCBOT_SYNC_INTERVAL", DEFAULT_SYNC_INTERVAL_SECONDS
        ),
        workers=env_int("GODOCBOT_WORKERS", DEFAULT_WORKERS),
        namespace=optional_env("GODOCBOT_NAMESPACE"),
        install_crds=env_bool("GODOCBOT_INSTALL_CRDS"),
    )
