# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR State Store - JSON state files under a state-files root.

Each item's captured state lives in one UTF-8 JSON file at
<state_root>/<dynamic_state_path>. Writes create parent directories and
overwrite existing content. There is no locking and no atomic rename:
a file that cannot be read back is reported and treated as missing.
"""

import json
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, Dict

import structlog

from wmr.errors import explain_invalid_state_path
from wmr.exceptions import StateFileError

logger = structlog.get_logger()


def state_file_path(state_root: Path, relative: str) -> Path:
    """
    Resolve a dynamic_state_path against the state-files root.

    Both separators are accepted so templates written on Windows
    resolve the same way everywhere.

    Args:
        state_root: Base directory for this operation's state files
        relative: Relative state path from the item descriptor

    Returns:
        Absolute path of the state file

    Raises:
        StateFileError: If relative is absolute, names the root itself,
            or escapes the root
    """
    windows_form = PureWindowsPath(relative)
    if (
        not relative
        or windows_form.anchor
        or PurePosixPath(relative).is_absolute()
        or not windows_form.parts
        or ".." in windows_form.parts
    ):
        raise StateFileError(
            explain_invalid_state_path(relative),
            details={"state_root": str(state_root)},
        )

    return Path(state_root).joinpath(*windows_form.parts)


def write_state_file(path: Path, record: Dict[str, Any]) -> Path:
    """
    Write a state record as JSON.

    Args:
        path: Destination file (parents are created)
        record: JSON-serializable mapping

    Returns:
        The path written

    Raises:
        StateFileError: If the record cannot be serialized or written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(record, indent=2, ensure_ascii=False)
        path.write_text(payload + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise StateFileError(
            f"Failed to write state file: {e}",
            details={"path": str(path)},
        )

    logger.debug("state_file_written", path=str(path), size=len(payload))
    return path


def read_state_file(path: Path) -> Dict[str, Any] | None:
    """
    Read a state record.

    Args:
        path: State file to read

    Returns:
        The decoded mapping, or None if the file is missing, unreadable,
        not valid JSON, or not a JSON object
    """
    if not path.is_file():
        return None

    try:
        record = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("state_file_unreadable", path=str(path), error=str(e))
        return None

    if not isinstance(record, dict):
        logger.warning(
            "state_file_unreadable",
            path=str(path),
            error=f"expected a JSON object, got {type(record).__name__}",
        )
        return None

    return record
