# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Paths - Backup directory priority and path expansion.
"""

import os
import re
from pathlib import Path

import structlog

logger = structlog.get_logger()

# $env:NAME (PowerShell) and %NAME% (cmd) references
_POWERSHELL_ENV = re.compile(r"\$env:([A-Za-z_][A-Za-z0-9_]*)", re.IGNORECASE)
_CMD_ENV = re.compile(r"%([A-Za-z_][A-Za-z0-9_]*)%")


def _lookup_env(match: re.Match) -> str:
    name = match.group(1)
    value = os.environ.get(name)
    if value is None:
        logger.warning("environment_variable_missing", name=name)
        return match.group(0)
    return value


def expand_path(text: str) -> Path:
    """
    Expand environment references and ~ in a template path.

    Supports $env:NAME, %NAME%, $NAME / ${NAME} and ~. Unknown variables
    are left in place.

    Args:
        text: Path as written in a template

    Returns:
        Expanded path
    """
    expanded = _POWERSHELL_ENV.sub(_lookup_env, text)
    expanded = _CMD_ENV.sub(_lookup_env, expanded)
    expanded = os.path.expandvars(expanded)
    return Path(os.path.expanduser(expanded))


def resolve_backup_path(
    relative: str | Path,
    machine_path: Path,
    shared_path: Path | None = None,
) -> Path | None:
    """
    Pick the directory holding a component's backup.

    Machine-specific backups take priority over shared ones.

    Args:
        relative: Component directory relative to the backup roots
        machine_path: Machine-specific backup root
        shared_path: Shared backup root (optional)

    Returns:
        The first existing directory, or None if neither exists
    """
    machine_candidate = Path(machine_path) / relative
    if machine_candidate.is_dir():
        logger.debug("backup_path_resolved", source="machine", path=str(machine_candidate))
        return machine_candidate

    if shared_path is not None:
        shared_candidate = Path(shared_path) / relative
        if shared_candidate.is_dir():
            logger.debug("backup_path_resolved", source="shared", path=str(shared_candidate))
            return shared_candidate

    logger.warning(
        "backup_path_missing",
        relative=str(relative),
        machine_path=str(machine_path),
        shared_path=str(shared_path) if shared_path else None,
    )
    return None
