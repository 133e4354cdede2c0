"""Ruter Ingfo?"""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()

HTTP_HELP_TEXT = dedent(
    """
    Automated Deployments (HTTP Help)

    Endpoints
    ---------
    - GET  /            : This help
    - GET  /api/status  : Liveness check
    - POST /api/ad      : GitHub webhook (X-Hub-Signature-256 required)

    Webhook setup
    -------------
    Content type: application/json
    Secret: the value of GITHUB_TOKEN on this server
    Events: pull requests
    """
).strip()


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return HTTP_HELP_TEXT
