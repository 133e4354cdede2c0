"""Payload builders and test doubles shared across tests."""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Optional

from autodeploy.services.ansible import DeploymentOutcome, DeploymentStatus
from autodeploy.services.mailer import NotificationMessage

SECRET = "It's a Secret to Everybody"
RECIPIENTS = ("ops@example.org", "dev@example.org")


def sign(body: bytes, secret: str = SECRET) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def pr_payload(
    action: str = "closed",
    merged: Optional[bool] = True,
    repo: str = "org/app",
) -> bytes:
    pull_request: dict[str, Any] = {"number": 7, "title": "Ship it"}
    if merged is not None:
        pull_request["merged"] = merged
    return json.dumps(
        {
            "action": action,
            "number": 7,
            "pull_request": pull_request,
            "repository": {"full_name": repo, "name": repo.split("/")[-1]},
        }
    ).encode()


class FakeRunner:
    """Records targets instead of spawning ansible-playbook."""

    def __init__(self, status: DeploymentStatus = DeploymentStatus.SUCCESS) -> None:
        self.status = status
        self.calls: list[str] = []
        self.ready_checks = 0

    def check_ready(self) -> None:
        self.ready_checks += 1

    async def run(self, target: str) -> DeploymentOutcome:
        self.calls.append(target)
        failed = self.status is not DeploymentStatus.SUCCESS
        return DeploymentOutcome(
            target=target,
            status=self.status,
            returncode=2 if failed else 0,
            stdout=b"PLAY RECAP ok=3",
            stderr=b"fatal: boom" if failed else b"",
        )


class FakeMailer:
    def __init__(self) -> None:
        self.sent: list[NotificationMessage] = []

    async def deliver(self, message: NotificationMessage) -> bool:
        self.sent.append(message)
        return True
