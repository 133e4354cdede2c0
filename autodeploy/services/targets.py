"""Repository → deployment target table."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from autodeploy.config import Settings
from autodeploy.errors import ConfigError, ValidationError

logger = logging.getLogger(__name__)

TargetMapping = Mapping[str, str]


def _check_entries(data: object, source: str) -> dict[str, str]:
    if not isinstance(data, dict):
        raise ConfigError("Invalid target mapping.", f"{source}: expected a JSON object")
    entries: dict[str, str] = {}
    for repo, target in data.items():
        if not isinstance(target, str) or not target.strip() or not str(repo).strip():
            raise ConfigError(
                "Invalid target mapping.", f"{source}: bad entry {repo!r} -> {target!r}"
            )
        entries[str(repo).strip()] = target.strip()
    return entries


def parse_inline_targets(raw: str) -> dict[str, str]:
    """
    Parse the ``TARGETS`` value.

    Accepts a JSON object or ``owner/repo=tag`` pairs separated by commas.
    """
    text = (raw or "").strip()
    if not text:
        return {}
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ConfigError("Invalid target mapping.", f"TARGETS: {exc}") from exc
        return _check_entries(data, "TARGETS")

    pairs: dict[str, str] = {}
    for item in text.split(","):
        if not item.strip():
            continue
        repo, sep, target = item.partition("=")
        if not sep:
            raise ConfigError("Invalid target mapping.", f"TARGETS: missing '=' in {item!r}")
        pairs[repo] = target
    return _check_entries(pairs, "TARGETS")


def load_targets_file(path: str | Path) -> dict[str, str]:
    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError("Invalid target mapping.", f"{file_path}: {exc}") from exc
    return _check_entries(data, str(file_path))


def load_target_mapping(settings: Settings) -> TargetMapping:
    """
    Build the read-only mapping once at startup.

    Entries from ``TARGETS`` override those from ``TARGETS_FILE``.
    """
    entries: dict[str, str] = {}
    if settings.targets_file:
        entries.update(load_targets_file(settings.targets_file))
    entries.update(parse_inline_targets(settings.targets))
    if not entries:
        logger.warning("No repositories are configured for automated deployment")
    else:
        logger.info("Loaded %d deployment target(s)", len(entries))
    return MappingProxyType(entries)


def resolve_target(mapping: TargetMapping, repository_full_name: str) -> str:
    """
    Return the target tag for a repository.

    Raises
    ------
    ValidationError
        The repository has no entry in the mapping.
    """
    target = mapping.get(repository_full_name)
    if target is None:
        raise ValidationError(
            f"{repository_full_name} is not configured for automated deployment."
        )
    return target
