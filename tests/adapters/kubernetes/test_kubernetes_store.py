from __future__ import annotations

import json
import threading
from collections.abc import Callable  # noqa: TC003
from typing import Any

import httpx
import pytest

from godocbot.adapters.kubernetes import KubernetesClient, KubernetesResourceStore
from godocbot.adapters.kubernetes import store as store_module
from godocbot.adapters.kubernetes.client import status_error
from godocbot.config import KubernetesConfig, ResilienceConfig
from godocbot.domain.errors import (
    AlreadyExistsError,
    NotFoundError,
    StoreError,
    StoreWriteConflictError,
)
from godocbot.domain.model import ManagedWorkload, ObjectKey, TrackedPullRequest
from godocbot.domain.ports import EventType, ResourceStore, WatchEvent
from godocbot.domain.preview import CommitRefresher, PullRequestRef, build_workload
from tests.helpers.hosts import FakeRepositoryHost
from tests.helpers.http_mocks import make_client_factory
from tests.helpers.kube_payloads import deployment_payload, pull_request_payload, status_payload

API = "https://kube.test"
PR_ITEM = "/apis/code.godocbot.io/v1alpha1/namespaces/docs/pullrequests/widgets-42"
PR_COLLECTION = "/apis/code.godocbot.io/v1alpha1/pullrequests"
KEY = ObjectKey("docs", "widgets-42")

type Handler = Callable[[httpx.Request], httpx.Response]


def _store(handler: Handler) -> KubernetesResourceStore:
    config = KubernetesConfig(
        api_server=API,
        token=None,
        verify=True,
        resilience=ResilienceConfig(name="kubernetes-test", base_url=API, cache=None),
        watch_timeout_seconds=5,
    )
    client = KubernetesClient(config=config, client_factory=make_client_factory(handler))
    return KubernetesResourceStore(client)


def _json(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)


def _stream(*events: dict[str, Any]) -> httpx.Response:
    body = "\n".join(json.dumps(event) for event in events) + "\n"
    return httpx.Response(200, content=body.encode())


def test_store_satisfies_port() -> None:
    assert isinstance(_store(lambda _: httpx.Response(200, json={})), ResourceStore)


def test_get_pull_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=pull_request_payload())

    pull_request = _store(handler).get(TrackedPullRequest, KEY)

    assert pull_request.spec.commit_id == "deadbeef"
    assert seen[0].method == "GET"
    assert seen[0].url.path == PR_ITEM


def test_get_missing_resource_raises_not_found() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json=status_payload(404, "NotFound"))

    with pytest.raises(NotFoundError) as excinfo:
        _store(handler).get(TrackedPullRequest, KEY)

    assert excinfo.value.key == KEY


def test_list_across_namespaces() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(
            200,
            json={
                "metadata": {"resourceVersion": "100"},
                "items": [pull_request_payload("a"), pull_request_payload("b", namespace="x")],
            },
        )

    items = _store(handler).list(TrackedPullRequest)

    assert [str(item.key) for item in items] == ["docs/a", "x/b"]
    assert seen == [PR_COLLECTION]


def test_update_sends_resource_version_and_unknown_fields() -> None:
    sent: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=pull_request_payload(commit_id=None))
        body = _json(request)
        sent.append(body)
        body["metadata"]["resourceVersion"] = "8"
        return httpx.Response(200, json=body)

    store = _store(handler)
    pull_request = store.get(TrackedPullRequest, KEY)
    pull_request.spec.commit_id = "deadbeef"

    updated = store.update(pull_request)

    assert updated.metadata.resource_version == "8"
    assert sent[0]["metadata"]["resourceVersion"] == "7"
    assert sent[0]["metadata"]["annotations"] == {"team": "docs"}
    assert sent[0]["spec"]["commit_id"] == "deadbeef"


def test_update_conflict_raises_write_conflict() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=pull_request_payload())
        return httpx.Response(409, json=status_payload(409, "Conflict", "object was modified"))

    store = _store(handler)

    with pytest.raises(StoreWriteConflictError, match="object was modified"):
        store.update(store.get(TrackedPullRequest, KEY))


def test_create_workload_posts_to_collection() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=pull_request_payload())
        seen.append(request)
        return httpx.Response(201, json=deployment_payload())

    store = _store(handler)
    owner = store.get(TrackedPullRequest, KEY)
    ref = PullRequestRef("github.com", "acme", "widgets", 42, "deadbeef")

    created = store.create(build_workload(owner, ref))

    assert created.metadata.uid == "uid-deploy-widgets-42"
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/apis/apps/v1/namespaces/docs/deployments"
    body = _json(seen[0])
    assert "resourceVersion" not in body["metadata"]
    assert body["metadata"]["ownerReferences"][0]["uid"] == "uid-widgets-42"


def test_create_existing_raises_already_exists() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=pull_request_payload())
        return httpx.Response(409, json=status_payload(409, "AlreadyExists"))

    store = _store(handler)
    pull_request = store.get(TrackedPullRequest, KEY)

    with pytest.raises(AlreadyExistsError):
        store.create(pull_request)


def test_delete_uses_background_propagation() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"kind": "Status", "status": "Success"})

    _store(handler).delete(ManagedWorkload, KEY)

    assert seen[0].method == "DELETE"
    assert seen[0].url.path == "/apis/apps/v1/namespaces/docs/deployments/widgets-42"
    assert _json(seen[0]) == {"propagationPolicy": "Background"}


def test_server_errors_become_store_errors() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json=status_payload(500, "InternalError"))

    with pytest.raises(StoreError) as excinfo:
        _store(handler).get(TrackedPullRequest, KEY)

    assert not isinstance(excinfo.value, NotFoundError)


def test_transport_errors_become_store_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(StoreError):
        _store(handler).list(TrackedPullRequest, namespace="docs")


def test_watch_lists_then_streams_events() -> None:
    stop = threading.Event()
    events: list[WatchEvent] = []
    watch_params: list[httpx.QueryParams] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("watch") != "true":
            return httpx.Response(
                200,
                json={"metadata": {"resourceVersion": "100"}, "items": [pull_request_payload()]},
            )
        watch_params.append(request.url.params)
        return _stream(
            {"type": "MODIFIED", "object": pull_request_payload(resource_version="101")},
            {"type": "BOOKMARK", "object": {"metadata": {"resourceVersion": "102"}}},
            {"type": "DELETED", "object": pull_request_payload(resource_version="103")},
        )

    def on_event(event: WatchEvent) -> None:
        events.append(event)
        if event.type is EventType.DELETED:
            stop.set()

    _store(handler).watch(TrackedPullRequest, on_event, stop=stop)

    assert [event.type for event in events] == [
        EventType.ADDED,
        EventType.MODIFIED,
        EventType.DELETED,
    ]
    assert events[1].resource.metadata.resource_version == "101"
    assert watch_params[0]["resourceVersion"] == "100"
    assert watch_params[0]["allowWatchBookmarks"] == "true"
    assert watch_params[0]["timeoutSeconds"] == "5"


def test_watch_resumes_from_last_seen_version() -> None:
    stop = threading.Event()
    events: list[WatchEvent] = []
    watch_versions: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("watch") != "true":
            return httpx.Response(200, json={"metadata": {"resourceVersion": "100"}, "items": []})
        watch_versions.append(request.url.params["resourceVersion"])
        if len(watch_versions) == 1:
            return _stream({"type": "BOOKMARK", "object": {"metadata": {"resourceVersion": "150"}}})
        return _stream({"type": "ADDED", "object": pull_request_payload(resource_version="151")})

    def on_event(event: WatchEvent) -> None:
        events.append(event)
        stop.set()

    _store(handler).watch(TrackedPullRequest, on_event, stop=stop)

    assert watch_versions == ["100", "150"]
    assert len(events) == 1


def test_watch_relists_when_version_expired() -> None:
    stop = threading.Event()
    events: list[WatchEvent] = []
    lists: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("watch") != "true":
            lists.append(1)
            return httpx.Response(
                200,
                json={
                    "metadata": {"resourceVersion": str(100 * len(lists))},
                    "items": [pull_request_payload()],
                },
            )
        return _stream({"type": "ERROR", "object": status_payload(410, "Expired")})

    def on_event(event: WatchEvent) -> None:
        events.append(event)
        if len(events) == 2:
            stop.set()

    _store(handler).watch(TrackedPullRequest, on_event, stop=stop)

    assert len(lists) == 2
    assert [event.type for event in events] == [EventType.ADDED, EventType.ADDED]


def test_watch_skips_undecodable_objects() -> None:
    stop = threading.Event()
    events: list[WatchEvent] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("watch") != "true":
            return httpx.Response(200, json={"metadata": {"resourceVersion": "1"}, "items": []})
        return _stream(
            {"type": "ADDED", "object": {"metadata": {"resourceVersion": "2"}}},
            {"type": "ADDED", "object": pull_request_payload(resource_version="3")},
        )

    def on_event(event: WatchEvent) -> None:
        events.append(event)
        stop.set()

    _store(handler).watch(TrackedPullRequest, on_event, stop=stop)

    assert len(events) == 1
    assert events[0].resource.key == KEY


def _listing_with_bad_item() -> dict[str, Any]:
    bad = pull_request_payload("broken")
    bad["spec"]["url"] = 42
    return {
        "metadata": {"resourceVersion": "100"},
        "items": [pull_request_payload("good", commit_id="old"), bad],
    }


def test_list_skips_undecodable_items() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_listing_with_bad_item())

    items = _store(handler).list(TrackedPullRequest)

    assert [str(item.key) for item in items] == ["docs/good"]


def test_refresh_continues_past_undecodable_pull_request() -> None:
    sent: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            body = _json(request)
            sent.append(body)
            return httpx.Response(200, json=body)
        return httpx.Response(200, json=_listing_with_bad_item())

    host = FakeRepositoryHost()
    host.open("acme", "widgets", 42, "new")

    result = CommitRefresher(_store(handler), host).refresh()

    assert host.list_calls() == [("list", "acme", "widgets")]
    assert result.updated == [ObjectKey("docs", "good")]
    assert sent[0]["spec"]["commit_id"] == "new"


def test_watch_retries_after_malformed_error_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(store_module, "WATCH_RETRY_SECONDS", 0)
    stop = threading.Event()
    events: list[WatchEvent] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("watch") != "true":
            return httpx.Response(
                200,
                json={"metadata": {"resourceVersion": "100"}, "items": [pull_request_payload()]},
            )
        return _stream({"type": "ERROR", "object": {"kind": "Status", "code": "teapot"}})

    def on_event(event: WatchEvent) -> None:
        events.append(event)
        if len(events) == 2:
            stop.set()

    _store(handler).watch(TrackedPullRequest, on_event, stop=stop)

    assert [event.type for event in events] == [EventType.ADDED, EventType.ADDED]


def test_status_error_tolerates_malformed_status() -> None:
    error = status_error({"code": "teapot", "reason": ["not", "a", "string"]})

    assert error.status_code == 500
    assert not error.gone
