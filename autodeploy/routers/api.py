"""Ruter API: webhook intake and liveness."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Header, Request
from fastapi.responses import PlainTextResponse

from autodeploy.errors import PayloadTooLarge
from autodeploy.services.deploy import deploy_and_notify, notify_skip
from autodeploy.services.github import parse_event
from autodeploy.services.targets import resolve_target
from autodeploy.utils import gh_verify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["deployments"])

SIGNATURE_HEADER = b"x-hub-signature-256"
STATUS_TEXT = "automated deployments: running"


def _raw_header(request: Request, name: bytes) -> Optional[bytes]:
    # Raw bytes so that a non-ASCII signature is reported as undecodable.
    for key, value in request.headers.raw:
        if key.lower() == name:
            return value
    return None


def _recipients_text(recipients: tuple[str, ...]) -> str:
    if not recipients:
        return "no notification recipients are configured"
    return "results will be emailed to " + ", ".join(recipients)


async def _read_body(request: Request, limit: int) -> bytes:
    """
    Read the body, refusing it once it passes ``limit`` bytes.

    A declared Content-Length over the limit is refused before reading.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(
            "Request body too large.", f"Content-Length {declared} exceeds {limit}"
        )

    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            raise PayloadTooLarge("Request body too large.", f"body exceeds {limit} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


@router.get("/status", response_class=PlainTextResponse)
def status() -> str:
    """Liveness check, no authentication."""
    return STATUS_TEXT


@router.post("/ad", response_class=PlainTextResponse)
async def post_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: Optional[str] = Header(None),
) -> str:
    """
    Handle webhooks for potential automated deployment.

    The signature is checked before the body is interpreted. A merged pull
    request on a configured repository is acknowledged at once; the playbook
    run and its notification happen after the response is sent.
    """
    state = request.app.state
    settings = state.settings

    body = await _read_body(request, settings.request_body_max_bytes)

    gh_verify(settings.webhook_secret, body, _raw_header(request, SIGNATURE_HEADER))

    if x_github_event == "ping":
        logger.info("Ping delivery received")
        return "pong"

    event = parse_event(body)
    repo = event.repository_full_name

    if not event.is_closed:
        logger.info("%s: action %r, nothing to do", repo, event.action)
        return "nothing to do"

    if not event.is_merged:
        logger.info("%s: pull request closed without merge, no deployment attempted", repo)
        background_tasks.add_task(notify_skip, state.mailer, settings.notify_recipients, repo)
        return "not merged, no deployment attempted"

    target = resolve_target(state.targets, repo)
    state.runner.check_ready()

    logger.info("%s: merged, scheduling redeployment of %s", repo, target)
    background_tasks.add_task(
        deploy_and_notify,
        state.runner,
        state.mailer,
        settings.notify_recipients,
        repo,
        target,
    )
    return (
        f"Redeployment of {target} will be attempted; "
        f"{_recipients_text(settings.notify_recipients)}."
    )
