"""Minimal Pydantic models for the GitHub pull request API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GitHubCommitRef(GitHubBaseModel):
    sha: str
    ref: str | None = None
    label: str | None = None


class GitHubPullRequest(GitHubBaseModel):
    number: int
    state: str | None = None
    html_url: str | None = None
    head: GitHubCommitRef


class GitHubErrorResponse(GitHubBaseModel):
    message: str
    documentation_url: str | None = None
