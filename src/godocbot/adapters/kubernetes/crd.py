"""CustomResourceDefinition for tracked pull requests."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from godocbot.domain.model import PULL_REQUEST_GROUP, PULL_REQUEST_VERSION

from .client import KubernetesAPIError

if TYPE_CHECKING:
    from .client import KubernetesClient

log = getLogger(__name__)

CRD_PATH: Final = "/apis/apiextensions.k8s.io/v1/customresourcedefinitions"
PULL_REQUEST_PLURAL: Final = "pullrequests"


def pull_request_crd() -> dict[str, Any]:
    """Manifest for the namespaced ``PullRequest`` kind.

    ``status`` is a plain field rather than a subresource, so a regular update
    writes ``spec`` and ``status`` together.
    """

    string = {"type": "string"}
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": f"{PULL_REQUEST_PLURAL}.{PULL_REQUEST_GROUP}"},
        "spec": {
            "group": PULL_REQUEST_GROUP,
            "scope": "Namespaced",
            "names": {
                "kind": "PullRequest",
                "listKind": "PullRequestList",
                "plural": PULL_REQUEST_PLURAL,
                "singular": "pullrequest",
                "shortNames": ["pr"],
            },
            "versions": [
                {
                    "name": PULL_REQUEST_VERSION,
                    "served": True,
                    "storage": True,
                    "schema": {
                        "openAPIV3Schema": {
                            "type": "object",
                            "properties": {
                                "spec": {
                                    "type": "object",
                                    "required": ["url"],
                                    "properties": {"url": string, "commit_id": string},
                                },
                                "status": {
                                    "type": "object",
                                    "properties": {"godoc_link": string},
                                },
                            },
                        }
                    },
                    "additionalPrinterColumns": [
                        {"name": "URL", "type": "string", "jsonPath": ".spec.url"},
                        {"name": "Commit", "type": "string", "jsonPath": ".spec.commit_id"},
                        {"name": "Preview", "type": "string", "jsonPath": ".status.godoc_link"},
                    ],
                }
            ],
        },
    }


def ensure_crd(client: KubernetesClient) -> bool:
    """Install the ``PullRequest`` CRD. Returns ``False`` if it was already there."""

    manifest = pull_request_crd()
    try:
        client.create(CRD_PATH, manifest)
    except KubernetesAPIError as exc:
        if exc.conflict:
            log.info("CRD %s already installed", manifest["metadata"]["name"])
            return False
        raise
    log.info("Installed CRD %s", manifest["metadata"]["name"])
    return True
