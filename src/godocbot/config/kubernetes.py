"""Kubernetes API server connection settings.

Outside a cluster set ``KUBE_API_SERVER`` (``kubectl proxy`` exposes one at
``http://127.0.0.1:8001`` without credentials); inside a pod the service account
mounted under ``/var/run/secrets/kubernetes.io/serviceaccount`` is used.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_bool, env_float, optional_env
from .errors import MissingConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy

SERVICE_ACCOUNT_DIR: Final = Path("/var/run/secrets/kubernetes.io/serviceaccount")
KUBE_TIMEOUT_SECONDS: Final = 30.0
WATCH_TIMEOUT_SECONDS: Final = 300.0


@dataclass(frozen=True)
class KubernetesConfig:
    api_server: str
    token: str | None
    verify: bool | str
    resilience: ResilienceConfig
    watch_timeout_seconds: float = WATCH_TIMEOUT_SECONDS


def _in_cluster_server() -> str | None:
    host = os.getenv("KUBERNETES_SERVICE_HOST")
    port = os.getenv("KUBERNETES_SERVICE_PORT")
    if not host or not port:
        return None
    if ":" in host:
        host = f"[{host}]"
    return f"https://{host}:{port}"


def _read_token(service_account_dir: Path) -> str | None:
    token = optional_env("KUBE_TOKEN")
    if token:
        return token
    token_file = optional_env("KUBE_TOKEN_FILE")
    path = Path(token_file) if token_file else service_account_dir / "token"
    if path.is_file():
        return path.read_text().strip() or None
    return None


def _resolve_verify(service_account_dir: Path) -> bool | str:
    if env_bool("KUBE_INSECURE_SKIP_TLS_VERIFY"):
        return False
    ca_file = optional_env("KUBE_CA_FILE")
    if ca_file:
        return ca_file
    in_cluster_ca = service_account_dir / "ca.crt"
    if in_cluster_ca.is_file():
        return str(in_cluster_ca)
    return True


def get_kubernetes_config(
    *,
    service_account_dir: Path = SERVICE_ACCOUNT_DIR,
) -> KubernetesConfig:
    api_server = optional_env("KUBE_API_SERVER") or _in_cluster_server()
    if api_server is None:
        raise MissingConfigurationError(
            "Missing configuration for: KUBE_API_SERVER (not running inside a cluster)"
        )
    api_server = api_server.rstrip("/")
    token = _read_token(service_account_dir)
    verify = _resolve_verify(service_account_dir)

    headers = {"Accept": "application/json", "User-Agent": "godocbot"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    return KubernetesConfig(
        api_server=api_server,
        token=token,
        verify=verify,
        watch_timeout_seconds=env_float("KUBE_WATCH_TIMEOUT_SECONDS", WATCH_TIMEOUT_SECONDS),
        resilience=ResilienceConfig(
            name="kubernetes",
            base_url=api_server,
            timeout_seconds=env_float("KUBE_TIMEOUT_SECONDS", KUBE_TIMEOUT_SECONDS),
            # 409 is never retried here; conflicts go back to the reconciler.
            retry=RetryPolicy(total=3),
            cache=None,
            default_headers=headers,
            verify=verify,
        ),
    )
