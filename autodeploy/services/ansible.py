"""Runs ansible-playbook for a single deployment target."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from autodeploy.config import Settings
from autodeploy.errors import ExecutionError

logger = logging.getLogger(__name__)


class DeploymentStatus(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    EXECUTION_ERROR = "execution error"


@dataclass(frozen=True)
class DeploymentOutcome:
    """Result of one automation run."""

    target: str
    status: DeploymentStatus
    returncode: Optional[int] = None
    stdout: Optional[bytes] = None
    stderr: Optional[bytes] = None
    error_detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DeploymentStatus.SUCCESS


class AnsibleRunner:
    """
    Invoke the playbook scoped to one tag.

    The run has no timeout and no per-target exclusion: two deliveries for
    the same repository may overlap.
    """

    def __init__(self, settings: Settings) -> None:
        self.binary = settings.ansible_binary
        self.project_dir = settings.ansible_project_dir
        self.playbook = settings.ansible_playbook
        self.inventory = settings.ansible_inventory
        self.user = settings.ansible_user
        self._running: dict[str, int] = {}

    def build_command(self, target: str) -> list[str]:
        cmd = [self.binary, self.playbook, "-i", self.inventory]
        if self.user:
            cmd += ["--user", self.user]
        cmd += ["--tags", target]
        return cmd

    def check_ready(self) -> None:
        """
        Fail fast on the request path when the project directory is missing.

        Raises
        ------
        ExecutionError
        """
        if not Path(self.project_dir).is_dir():
            raise ExecutionError(
                "Internal server error",
                f"automation project directory {self.project_dir} does not exist",
            )

    async def run(self, target: str) -> DeploymentOutcome:
        cmd = self.build_command(target)
        overlapping = self._running.get(target, 0)
        if overlapping:
            logger.warning(
                "%d run(s) for %s still in progress; starting another", overlapping, target
            )
        self._running[target] = overlapping + 1
        logger.info("Running %s in %s", " ".join(cmd), self.project_dir)
        try:
            try:
                proc = await asyncio.create_subprocess_exec(
                    *cmd,
                    cwd=self.project_dir,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                logger.error("Error trying to run the program for %s: %s", target, exc)
                return DeploymentOutcome(
                    target=target,
                    status=DeploymentStatus.EXECUTION_ERROR,
                    error_detail=f"Error trying to run the program: {exc}",
                )
            stdout, stderr = await proc.communicate()
        finally:
            remaining = self._running[target] - 1
            if remaining:
                self._running[target] = remaining
            else:
                del self._running[target]

        status = DeploymentStatus.SUCCESS if proc.returncode == 0 else DeploymentStatus.FAILURE
        logger.info("Deployment of %s finished: %s (exit %s)", target, status.value, proc.returncode)
        return DeploymentOutcome(
            target=target,
            status=status,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
        )
