"""HTTP contract tests for /api/ad and /api/status."""

from __future__ import annotations

import json
from dataclasses import replace
from unittest import mock

from fastapi.testclient import TestClient

from autodeploy.app import create_app
from autodeploy.errors import ExecutionError
from autodeploy.services.ansible import DeploymentStatus
from tests.helpers import FakeRunner, pr_payload, sign

URL = "/api/ad"


def _post(client: TestClient, body: bytes, signature: str | bytes | None = "auto", **headers):
    if signature == "auto":
        signature = sign(body)
    if signature is not None:
        headers["X-Hub-Signature-256"] = signature
    headers.setdefault("Content-Type", "application/json")
    return client.post(URL, content=body, headers=headers)


class TestStatus:
    def test_status(self, client):
        resp = client.get("/api/status")
        assert resp.status_code == 200
        assert resp.text == "automated deployments: running"

    def test_help(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "POST /api/ad" in resp.text


class TestAuthentication:
    def test_missing_signature(self, client, runner, mailer):
        with mock.patch("autodeploy.routers.api.parse_event") as parse:
            resp = _post(client, pr_payload(), signature=None)
        assert resp.status_code == 403
        assert resp.text == "Required header not provided."
        parse.assert_not_called()
        assert runner.calls == [] and mailer.sent == []

    def test_bad_signature_on_valid_body(self, client, runner, mailer):
        resp = _post(client, pr_payload(), signature=sign(b"something else"))
        assert resp.status_code == 403
        assert resp.text == "Invalid token."
        assert runner.calls == [] and mailer.sent == []

    def test_bad_signature_on_malformed_body_is_403_not_400(self, client):
        resp = _post(client, b"{not json", signature="sha256=deadbeef")
        assert resp.status_code == 403

    def test_undecodable_signature(self, client):
        resp = _post(client, pr_payload(), signature=b"sha256=\xff\xfe")
        assert resp.status_code == 403
        assert resp.text == "Unable to decode signature header."

    def test_missing_secret(self, settings, targets, runner, mailer):
        app = create_app(
            replace(settings, webhook_secret=""), targets=targets, runner=runner, mailer=mailer
        )
        resp = _post(TestClient(app), pr_payload())
        assert resp.status_code == 500
        assert resp.text == "Unable to verify token."
        assert runner.calls == [] and mailer.sent == []

    def test_body_too_large(self, settings, targets, runner, mailer):
        app = create_app(
            replace(settings, request_body_max_bytes=32),
            targets=targets,
            runner=runner,
            mailer=mailer,
        )
        resp = _post(TestClient(app), pr_payload())
        assert resp.status_code == 413

    def test_ping(self, client, runner, mailer):
        body = json.dumps({"zen": "Keep it logically awesome.", "hook_id": 1}).encode()
        resp = _post(client, body, **{"X-GitHub-Event": "ping"})
        assert resp.status_code == 200
        assert resp.text == "pong"
        assert runner.calls == [] and mailer.sent == []


class TestPayload:
    def test_malformed_json(self, client):
        resp = _post(client, b"{not json")
        assert resp.status_code == 400

    def test_missing_repository(self, client, runner, mailer):
        body = json.dumps({"action": "closed", "pull_request": {"merged": True}}).encode()
        resp = _post(client, body)
        assert resp.status_code == 400
        assert "repository" in resp.text
        assert runner.calls == [] and mailer.sent == []


class TestDecisions:
    def test_not_closed_does_nothing(self, client, runner, mailer):
        resp = _post(client, pr_payload(action="opened"))
        assert resp.status_code == 200
        assert resp.text == "nothing to do"
        assert runner.calls == []
        assert mailer.sent == []

    def test_closed_not_merged_notifies_once(self, client, runner, mailer):
        resp = _post(client, pr_payload(merged=False))
        assert resp.status_code == 200
        assert resp.text == "not merged, no deployment attempted"
        assert runner.calls == []
        assert len(mailer.sent) == 1
        assert "No deployment was attempted." in mailer.sent[0].body

    def test_closed_without_merged_flag_is_skipped(self, client, runner, mailer):
        resp = _post(client, pr_payload(merged=None))
        assert resp.text == "not merged, no deployment attempted"
        assert runner.calls == []
        assert len(mailer.sent) == 1

    def test_unconfigured_repository(self, client, runner, mailer):
        resp = _post(client, pr_payload(repo="org/unknown"))
        assert resp.status_code == 400
        assert resp.text == "org/unknown is not configured for automated deployment."
        assert runner.calls == []
        assert mailer.sent == []

    def test_merged_configured_repository_deploys(self, client, runner, mailer):
        resp = _post(client, pr_payload())
        assert resp.status_code == 200
        assert "Redeployment of app_tag will be attempted" in resp.text
        assert "ops@example.org, dev@example.org" in resp.text
        # TestClient returns after background tasks have run.
        assert runner.calls == ["app_tag"]
        assert len(mailer.sent) == 1
        assert "success" in mailer.sent[0].body
        assert mailer.sent[0].subject.endswith("app_tag: success")

    def test_failed_run_is_reported_by_email_only(self, settings, targets, mailer):
        runner = FakeRunner(DeploymentStatus.FAILURE)
        client = TestClient(create_app(settings, targets=targets, runner=runner, mailer=mailer))
        resp = _post(client, pr_payload())
        assert resp.status_code == 200
        assert "status: failure" in mailer.sent[0].body

    def test_missing_project_directory(self, client, runner, mailer):
        runner.check_ready = mock.Mock(side_effect=ExecutionError("Internal server error"))
        resp = _post(client, pr_payload())
        assert resp.status_code == 500
        assert runner.calls == []
        assert mailer.sent == []

    def test_concurrent_repositories(self, client, runner, mailer):
        for repo in ("org/app", "org/api", "org/app"):
            assert _post(client, pr_payload(repo=repo)).status_code == 200
        assert runner.calls == ["app_tag", "api_tag", "app_tag"]
        assert len(mailer.sent) == 3
