"""the beautiful world start from here."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from autodeploy.config import Settings, settings as default_settings
from autodeploy.errors import DeploymentError
from autodeploy.routers import api, info
from autodeploy.services.ansible import AnsibleRunner
from autodeploy.services.mailer import Mailer
from autodeploy.services.targets import TargetMapping, load_target_mapping

logger = logging.getLogger(__name__)


async def deployment_error_handler(request: Request, exc: DeploymentError) -> PlainTextResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "%s %s -> %d %s (%s)",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
        exc.internal,
    )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    settings: Optional[Settings] = None,
    *,
    targets: Optional[TargetMapping] = None,
    runner: Optional[AnsibleRunner] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    """
    Build the API.

    The target mapping, runner and mailer are created once here and shared
    read-only by every request.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Automated Deployments API",
        version="0.1.0",
        description="API for automated deployments.",
    )
    app.state.settings = settings
    app.state.targets = targets if targets is not None else load_target_mapping(settings)
    app.state.runner = runner or AnsibleRunner(settings)
    app.state.mailer = mailer or Mailer(settings)

    app.add_exception_handler(DeploymentError, deployment_error_handler)
    app.include_router(info.router)
    app.include_router(api.router)
    return app
