"""Shared fixtures for the webhook tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from autodeploy.app import create_app
from autodeploy.config import Settings
from tests.helpers import RECIPIENTS, SECRET, FakeMailer, FakeRunner


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        webhook_secret=SECRET,
        ansible_project_dir=str(tmp_path),
        ansible_binary="ansible-playbook",
        ansible_playbook="controler_playbook.yaml",
        ansible_inventory="inventories/control.yaml",
        ansible_user="",
        request_body_max_bytes=16384,
        notify_recipients=RECIPIENTS,
        targets="",
        targets_file="",
        log_file="",
    )


@pytest.fixture
def targets() -> dict[str, str]:
    return {"org/app": "app_tag", "org/api": "api_tag"}


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def client(settings, targets, runner, mailer) -> TestClient:
    app = create_app(settings, targets=targets, runner=runner, mailer=mailer)
    return TestClient(app)
