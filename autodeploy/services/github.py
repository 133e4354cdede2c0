"""Interpretation of GitHub webhook payloads."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError as SchemaError

from autodeploy.errors import ValidationError
from autodeploy.schemas import WebhookPayload

CLOSED = "closed"


@dataclass(frozen=True)
class ParsedEvent:
    """Fields of a delivery that drive the deployment decision."""

    action: str
    repository_full_name: str
    merged: Optional[bool] = None

    @property
    def is_closed(self) -> bool:
        return self.action == CLOSED

    @property
    def is_merged(self) -> bool:
        # An absent flag means the event type carries none: not merged.
        return bool(self.merged)


def _first_error_field(exc: SchemaError) -> str:
    errors = exc.errors()
    if not errors:
        return "payload"
    return ".".join(str(part) for part in errors[0].get("loc", ())) or "payload"


def parse_event(body: bytes) -> ParsedEvent:
    """
    Parse a raw webhook body.

    Must only be called on a body whose signature has been verified.

    Raises
    ------
    ValidationError
        Body is not a JSON object, or ``repository.full_name``, ``action``
        or ``pull_request`` is missing.
    """
    try:
        raw = json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValidationError("Unable to get body of request as json.", str(exc)) from exc
    if not isinstance(raw, dict):
        raise ValidationError("Unable to get body of request as json.", "body is not an object")

    try:
        payload = WebhookPayload.model_validate(raw)
    except SchemaError as exc:
        field = _first_error_field(exc)
        raise ValidationError(f"Invalid {field} field in webhook.", str(exc)) from exc

    if payload.repository is None:
        raise ValidationError("Unable to get repository field from webhook.")
    if not payload.repository.full_name:
        raise ValidationError("Unable to get repository.full_name field from webhook.")
    if not payload.action:
        raise ValidationError("Unable to get action field from webhook.")
    if payload.pull_request is None:
        raise ValidationError("Unable to get pull_request field from webhook.")

    return ParsedEvent(
        action=payload.action,
        repository_full_name=payload.repository.full_name,
        merged=payload.pull_request.merged,
    )
