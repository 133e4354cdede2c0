"""Error types surfaced to the webhook caller."""

from __future__ import annotations

from typing import Optional


class DeploymentError(Exception):
    """
    Base error carrying the HTTP status and the message shown to the caller.

    ``internal`` holds detail that is logged but never sent back.
    """

    status_code: int = 500

    def __init__(self, message: str, internal: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.internal = internal or message


class AuthError(DeploymentError):
    """Signature header missing, undecodable or mismatched."""

    status_code = 403


class ValidationError(DeploymentError):
    """Malformed payload, missing field or unconfigured repository."""

    status_code = 400


class PayloadTooLarge(ValidationError):
    status_code = 413


class ConfigError(DeploymentError):
    """Secret or other required configuration unavailable."""

    status_code = 500


class ExecutionError(DeploymentError):
    """The automation tool could not be started."""

    status_code = 500
