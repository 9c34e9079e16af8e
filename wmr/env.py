# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration helpers.

Builds a WMRConfig from a small set of well-known environment variables.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Tuple

from wmr.config import WMRConfig, default_script_shell, default_shell
from wmr.errors import explain_missing_machine_path_env
from wmr.exceptions import ConfigurationError


def _parse_path(value: str | None) -> Path | None:
    if not value or not value.strip():
        return None
    return Path(os.path.expanduser(value.strip()))


def _parse_argv(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value or not value.strip():
        return default
    try:
        return tuple(shlex.split(value, posix=os.name != "nt"))
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid shell command line: {value!r}",
            details={"error": str(exc)},
        ) from exc


def create_config_from_env() -> WMRConfig:
    """
    Create a WMRConfig from environment variables.

    Required:
        - WMR_MACHINE_BACKUP_PATH: Machine-specific backup directory

    Optional environment variables:
        - WMR_SHARED_BACKUP_PATH: Backup directory shared between machines
        - WMR_ENCRYPTION_KEY_PATH: Fernet key file (created on first use)
        - WMR_ENCRYPTION_PASSPHRASE: Passphrase to derive a key from
        - WMR_SHELL: Command line prefix for commands and inline scripts,
          e.g. "pwsh -NoProfile -Command"
        - WMR_SCRIPT_SHELL: Command line prefix for script files,
          e.g. "pwsh -NoProfile -File"
    """

    machine_path = _parse_path(os.getenv("WMR_MACHINE_BACKUP_PATH"))
    if machine_path is None:
        raise ConfigurationError(explain_missing_machine_path_env())

    return WMRConfig(
        machine_backup_path=machine_path,
        shared_backup_path=_parse_path(os.getenv("WMR_SHARED_BACKUP_PATH")),
        encryption_key_path=_parse_path(os.getenv("WMR_ENCRYPTION_KEY_PATH")),
        encryption_passphrase=os.getenv("WMR_ENCRYPTION_PASSPHRASE") or None,
        shell=_parse_argv(os.getenv("WMR_SHELL"), default_shell()),
        script_shell=_parse_argv(os.getenv("WMR_SCRIPT_SHELL"), default_script_shell()),
    )
