"""Thin REST client for the Kubernetes API server."""

from __future__ import annotations

import asyncio
import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from godocbot.adapters.http_resilience import ResilientClient

from .schema import StatusModel

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

    from godocbot.config.http_resilience import ResilienceConfig
    from godocbot.config.kubernetes import KubernetesConfig

log = getLogger(__name__)

type Payload = dict[str, Any]
type RawEventHandler = Callable[[Payload], None]

WATCH_READ_MARGIN_SECONDS = 30.0


class KubernetesAPIError(RuntimeError):
    """Raised when the API server answers with an error status."""

    def __init__(self, message: str, *, status_code: int, reason: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason

    @property
    def not_found(self) -> bool:
        return self.status_code == httpx.codes.NOT_FOUND

    @property
    def conflict(self) -> bool:
        return self.status_code == httpx.codes.CONFLICT

    @property
    def already_exists(self) -> bool:
        return self.conflict and self.reason == "AlreadyExists"

    @property
    def gone(self) -> bool:
        return self.status_code == httpx.codes.GONE


class KubernetesClient:
    """Blocking facade over ``ResilientClient`` for JSON object requests."""

    def __init__(
        self,
        *,
        config: KubernetesConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def get(self, path: str) -> Payload:
        return asyncio.run(self._request("GET", path))

    def create(self, path: str, body: Payload) -> Payload:
        return asyncio.run(self._request("POST", path, body=body))

    def replace(self, path: str, body: Payload) -> Payload:
        return asyncio.run(self._request("PUT", path, body=body))

    def delete(self, path: str) -> Payload:
        return asyncio.run(self._request("DELETE", path, body={"propagationPolicy": "Background"}))

    def watch(
        self,
        path: str,
        *,
        resource_version: str,
        handler: RawEventHandler,
        stop: threading.Event,
    ) -> None:
        """Stream watch events for ``path`` until the server closes the stream.

        Returns early, between events, once ``stop`` is set.
        """
        asyncio.run(
            self._watch(path, resource_version=resource_version, handler=handler, stop=stop)
        )

    async def _request(self, method: str, path: str, *, body: Payload | None = None) -> Payload:
        async with self._client_factory(self._resilience) as client:
            if body is None:
                response = await client.request(method, path)
            else:
                response = await client.request(method, path, json=body)
        if not response.is_success:
            raise _api_error(response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise KubernetesAPIError(
                f"{method} {path}: non-JSON response", status_code=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise KubernetesAPIError(
                f"{method} {path}: expected an object", status_code=response.status_code
            )
        return payload

    async def _watch(
        self,
        path: str,
        *,
        resource_version: str,
        handler: RawEventHandler,
        stop: threading.Event,
    ) -> None:
        server_timeout = self._config.watch_timeout_seconds
        params: dict[str, str | int] = {
            "watch": "true",
            "allowWatchBookmarks": "true",
            "timeoutSeconds": int(server_timeout),
        }
        if resource_version:
            params["resourceVersion"] = resource_version
        timeout = httpx.Timeout(
            self._resilience.timeout_seconds,
            read=server_timeout + WATCH_READ_MARGIN_SECONDS,
        )

        async with (
            self._client_factory(self._resilience) as client,
            client.stream("GET", path, params=params, timeout=timeout) as response,
        ):
            if not response.is_success:
                await response.aread()
                raise _api_error(response)
            async for line in response.aiter_lines():
                if stop.is_set():
                    return
                if not line.strip():
                    continue
                try:
                    event = json.loads(line)
                except json.JSONDecodeError:
                    log.warning("Dropping undecodable watch line from %s", path)
                    continue
                handler(event)


def _api_error(response: httpx.Response) -> KubernetesAPIError:
    message = response.reason_phrase
    reason = ""
    try:
        status = StatusModel.model_validate(response.json())
    except (ValueError, ValidationError):
        pass
    else:
        message = status.message or message
        reason = status.reason
    return KubernetesAPIError(
        f"{response.request.method} {response.request.url.path}: "
        f"{response.status_code} {message}",
        status_code=response.status_code,
        reason=reason,
    )


def status_error(status: Payload) -> KubernetesAPIError:
    """Build an error from a ``Status`` object delivered inside a watch stream."""

    try:
        model = StatusModel.model_validate(status)
    except ValidationError:
        log.warning("Watch stream delivered a malformed Status: %r", status)
        return KubernetesAPIError("watch error: malformed status", status_code=500)
    return KubernetesAPIError(
        f"watch error: {model.code} {model.message}",
        status_code=model.code or 500,
        reason=model.reason,
    )
