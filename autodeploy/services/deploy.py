"""Background work scheduled after the webhook response is sent."""

from __future__ import annotations

import logging
from typing import Sequence

from autodeploy.services.ansible import AnsibleRunner, DeploymentOutcome, DeploymentStatus
from autodeploy.services.mailer import Mailer, build_deployment_message, build_skip_message

logger = logging.getLogger(__name__)


async def deploy_and_notify(
    runner: AnsibleRunner,
    mailer: Mailer,
    recipients: Sequence[str],
    repository: str,
    target: str,
) -> DeploymentOutcome:
    """
    Run the playbook for ``target`` and email the outcome.

    Any error escaping the runner becomes an execution-error outcome so that
    it still reaches the recipients instead of dying with the task.
    """
    try:
        outcome = await runner.run(target)
    except Exception as exc:
        logger.exception("Deployment task for %s crashed", target)
        outcome = DeploymentOutcome(
            target=target,
            status=DeploymentStatus.EXECUTION_ERROR,
            error_detail=f"Deployment task failed: {exc!r}",
        )
    await mailer.deliver(build_deployment_message(recipients, repository, outcome))
    return outcome


async def notify_skip(mailer: Mailer, recipients: Sequence[str], repository: str) -> None:
    await mailer.deliver(build_skip_message(recipients, repository))
