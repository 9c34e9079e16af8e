# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR File State - Capture and replay of configuration files and directories.

A file item is copied to its dynamic_state_path; a directory item is
mirrored below it with the same relative layout. When an item is
encrypted, each file is stored as the encoder's text instead of raw bytes.

Like registry items, a missing source on capture or missing state on
replay is reported as a warning and skipped.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import structlog

from wmr.config import FileItemConfig, FileKind
from wmr.encoding import Encoder
from wmr.errors import explain_bad_token, explain_missing_encoder
from wmr.exceptions import ConfigurationError, EncodingError, StateFileError
from wmr.paths import expand_path
from wmr.state.store import state_file_path

logger = structlog.get_logger()


@dataclass(frozen=True)
class CapturedFileState:
    """Files written (on capture) or restored (on replay) for one item."""

    name: str
    path: str
    kind: FileKind
    files: List[str] = field(default_factory=list)


def _encoder_for(config: FileItemConfig, encoder: Encoder | None) -> Encoder | None:
    if not config.encrypt:
        return None
    if encoder is None:
        raise ConfigurationError(
            explain_missing_encoder(config.name),
            details={"item": config.name},
        )
    return encoder


def _store(source: Path, dest: Path, encoder: Encoder | None) -> None:
    """Copy a live file into the state area."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        if encoder is not None:
            dest.write_text(encoder.protect(source.read_bytes()), encoding="ascii")
        else:
            shutil.copy2(source, dest)
    except OSError as e:
        raise StateFileError(
            f"Failed to store file: {e}",
            details={"source": str(source), "dest": str(dest)},
        )


def _restore(stored: Path, dest: Path, encoder: Encoder | None) -> None:
    """Copy a stored file back to its live location."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        if encoder is not None:
            dest.write_bytes(encoder.unprotect(stored.read_text(encoding="ascii")))
        else:
            shutil.copy2(stored, dest)
    except UnicodeDecodeError as e:
        raise EncodingError(
            explain_bad_token(),
            details={"stored": str(stored), "error": str(e)},
        )
    except OSError as e:
        raise StateFileError(
            f"Failed to restore file: {e}",
            details={"stored": str(stored), "dest": str(dest)},
        )


def _walk_files(root: Path) -> List[Path]:
    return sorted(p for p in root.rglob("*") if p.is_file())


def capture_file_state(
    config: FileItemConfig,
    state_root: Path,
    encoder: Encoder | None = None,
) -> CapturedFileState | None:
    """
    Capture one file or directory item.

    Args:
        config: File item descriptor
        state_root: State-files root for this operation
        encoder: Encoder for items with encrypt=True

    Returns:
        The captured file list, or None if the source does not exist

    Raises:
        ConfigurationError: If the item needs encryption and no encoder was given
        StateFileError: If copying fails
    """
    encoder = _encoder_for(config, encoder)
    source = expand_path(config.path)
    target = state_file_path(state_root, config.dynamic_state_path)

    if config.kind is FileKind.FILE:
        if not source.is_file():
            logger.warning("file_source_missing", item=config.name, path=str(source))
            return None

        _store(source, target, encoder)
        files = [source.name]
    else:
        if not source.is_dir():
            logger.warning("directory_source_missing", item=config.name, path=str(source))
            return None

        # A fresh capture replaces whatever an earlier run left behind
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()
        target.mkdir(parents=True, exist_ok=True)

        files = []
        for path in _walk_files(source):
            relative = path.relative_to(source)
            _store(path, target / relative, encoder)
            files.append(relative.as_posix())

    logger.info(
        "file_state_captured",
        item=config.name,
        kind=config.kind.value,
        file_count=len(files),
        encrypted=encoder is not None,
    )
    return CapturedFileState(name=config.name, path=str(source), kind=config.kind, files=files)


def replay_file_state(
    config: FileItemConfig,
    state_root: Path,
    encoder: Encoder | None = None,
) -> CapturedFileState | None:
    """
    Replay one file or directory item to its live location.

    Directory replay is additive: files that exist at the destination but
    not in the stored state are left alone.

    Args:
        config: File item descriptor
        state_root: State-files root for this operation
        encoder: Encoder for items with encrypt=True

    Returns:
        The restored file list, or None if no stored state exists

    Raises:
        EncodingError: If encrypted content cannot be decoded
        StateFileError: If copying fails
    """
    encoder = _encoder_for(config, encoder)
    stored = state_file_path(state_root, config.dynamic_state_path)
    destination = expand_path(config.path)

    if config.kind is FileKind.FILE:
        if not stored.is_file():
            logger.warning("state_file_missing", item=config.name, state_file=str(stored))
            return None

        _restore(stored, destination, encoder)
        files = [destination.name]
    else:
        if not stored.is_dir():
            logger.warning("state_file_missing", item=config.name, state_file=str(stored))
            return None

        files = []
        for path in _walk_files(stored):
            relative = path.relative_to(stored)
            _restore(path, destination / relative, encoder)
            files.append(relative.as_posix())

    logger.info(
        "file_state_replayed",
        item=config.name,
        kind=config.kind.value,
        file_count=len(files),
    )
    return CapturedFileState(
        name=config.name, path=str(destination), kind=config.kind, files=files
    )
