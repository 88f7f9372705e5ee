"""Error taxonomy shared by the reconcilers, ports and adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from godocbot.domain.model import ObjectKey


class GodocbotError(RuntimeError):
    """Base class for every error raised by godocbot."""


class MalformedReferenceError(GodocbotError, ValueError):
    """Raised when a pull request URL cannot be parsed into a reference."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Malformed pull request URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class StoreError(GodocbotError):
    """Raised when the resource store rejects or fails a request."""


class NotFoundError(StoreError):
    """The requested resource does not exist (usually: it was deleted)."""

    def __init__(self, kind: str, key: ObjectKey) -> None:
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


class AlreadyExistsError(StoreError):
    """A resource with the same key already exists."""

    def __init__(self, kind: str, key: ObjectKey) -> None:
        super().__init__(f"{kind} {key} already exists")
        self.kind = kind
        self.key = key


class StoreWriteConflictError(StoreError):
    """The write was based on a stale read and must be retried with a fresh one."""

    def __init__(self, kind: str, key: ObjectKey, *, detail: str | None = None) -> None:
        message = f"Conflict writing {kind} {key}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.kind = kind
        self.key = key


class RepositoryHostError(GodocbotError):
    """Base class for failures talking to the repository host."""


class HostUnavailableError(RepositoryHostError):
    """The repository host could not be reached or answered with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedHostResponseError(RepositoryHostError):
    """The repository host answered with a payload we cannot interpret."""
