"""Process settings, loaded once from the environment (and `.env`)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def parse_recipients(raw: str | None) -> tuple[str, ...]:
    """
    Split a comma-separated recipient list.

    Order is kept, blanks and duplicates are dropped.
    """
    seen: list[str] = []
    for part in (raw or "").split(","):
        addr = part.strip()
        if addr and addr not in seen:
            seen.append(addr)
    return tuple(seen)


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    webhook_secret: str = os.getenv("GITHUB_TOKEN", "")

    ansible_project_dir: str = os.getenv("ANSIBLE_PROJECT_DIR", "/srv/cloud-ansible")
    ansible_binary: str = os.getenv("ANSIBLE_BINARY", "ansible-playbook")
    ansible_playbook: str = os.getenv("ANSIBLE_PLAYBOOK", "controler_playbook.yaml")
    ansible_inventory: str = os.getenv("ANSIBLE_INVENTORY", "inventories/control.yaml")
    ansible_user: str = os.getenv("ANSIBLE_USER", "")

    notify_recipients: tuple[str, ...] = parse_recipients(os.getenv("NOTIFY_RECIPIENTS"))
    mail_from: str = os.getenv("MAIL_FROM", "automated-deployments@localhost")
    smtp_host: str = os.getenv("SMTP_HOST", "localhost")
    smtp_port: int = int(os.getenv("SMTP_PORT", "25"))

    targets_file: str = os.getenv("TARGETS_FILE", "")
    targets: str = os.getenv("TARGETS", "")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "api.log")

    bind_host: str = os.getenv("BIND_HOST", "127.0.0.1")
    bind_port: int = int(os.getenv("BIND_PORT", "7878"))
    request_body_max_bytes: int = int(os.getenv("REQUEST_BODY_MAX_BYTES", "16384"))


settings = Settings()
