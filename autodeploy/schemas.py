"""Webhook payload schemas"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Repository(BaseModel):
    """Only the repository field used for target lookup."""

    model_config = ConfigDict(extra="allow")

    full_name: Optional[str] = None


class PullRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    merged: Optional[bool] = None


class WebhookPayload(BaseModel):
    """
    Minimal model for a GitHub webhook delivery.
    Only fields used by this app are included.
    """

    model_config = ConfigDict(extra="allow")

    action: Optional[str] = None
    repository: Optional[Repository] = None
    pull_request: Optional[PullRequest] = None
