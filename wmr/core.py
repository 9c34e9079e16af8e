# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Core - Backup and restore runs for one template.

A run gates on the template's prerequisites, then captures (backup) or
replays (restore) every registry item and file item that takes part in
the operation, against one state-files root. A failing item is logged
and recorded; it does not stop the remaining items.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from pathlib import Path
from typing import List

import structlog

from wmr.builder import Template
from wmr.config import FileItemConfig, Operation, RegistryItemConfig, WMRConfig
from wmr.encoding import Encoder, FernetEncoder
from wmr.ops.process import ProcessRunner
from wmr.ops.process_real import SubprocessRunner
from wmr.ops.registry import RegistryAccessor
from wmr.ops.registry_real import WinRegistry
from wmr.paths import resolve_backup_path
from wmr.prerequisites import evaluate_prerequisites
from wmr.state.file_state import capture_file_state, replay_file_state
from wmr.state.registry_state import capture_registry_state, replay_registry_state

logger = structlog.get_logger()


@dataclass
class OperationResult:
    """Result of a backup or restore run."""

    operation_id: str  # ULID
    operation: str
    template: str
    processed_count: int
    skipped_count: int
    failed_count: int
    errors: List[str]
    duration_seconds: float
    processed_items: List[str] = field(default_factory=list)
    skipped_items: List[str] = field(default_factory=list)
    failed_items: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.failed_count == 0


@dataclass(frozen=True)
class EngineContext:
    """System capabilities shared by every item in a run."""

    registry: RegistryAccessor
    runner: ProcessRunner
    encoder: Encoder | None = None


def initialize_context(config: WMRConfig) -> EngineContext:
    """
    Build the real system capabilities for a configuration.

    A key file takes priority over a passphrase. Without either, the
    context has no encoder and encrypted items will fail.

    Args:
        config: WMR configuration

    Returns:
        EngineContext backed by winreg and subprocess
    """
    encoder: Encoder | None = None
    if config.encryption_key_path is not None:
        encoder = FernetEncoder.load_or_create(config.encryption_key_path)
    elif config.encryption_passphrase:
        encoder = FernetEncoder.from_passphrase(config.encryption_passphrase)

    return EngineContext(
        registry=WinRegistry(),
        runner=SubprocessRunner(shell=config.shell, script_shell=config.script_shell),
        encoder=encoder,
    )


def backup_root_for(config: WMRConfig, component: str | Path) -> Path:
    """State-files root for backing up a component (always machine-specific)."""
    return Path(config.machine_backup_path) / component


def restore_root_for(config: WMRConfig, component: str | Path) -> Path | None:
    """State-files root for restoring a component, machine-specific first."""
    return resolve_backup_path(component, config.machine_backup_path, config.shared_backup_path)


def _process_registry_item(
    item: RegistryItemConfig,
    operation: Operation,
    state_root: Path,
    context: EngineContext,
) -> bool:
    if operation is Operation.BACKUP:
        state = capture_registry_state(item, state_root, context.registry, context.encoder)
        return state is not None
    return replay_registry_state(item, state_root, context.registry, context.encoder)


def _process_file_item(
    item: FileItemConfig,
    operation: Operation,
    state_root: Path,
    context: EngineContext,
) -> bool:
    if operation is Operation.BACKUP:
        return capture_file_state(item, state_root, context.encoder) is not None
    return replay_file_state(item, state_root, context.encoder) is not None


def _run(
    template: Template,
    state_root: Path,
    context: EngineContext,
    operation: Operation,
) -> OperationResult:
    from ulid import ULID

    operation_id = str(ULID())
    start_time = datetime.now(UTC)

    logger.info(
        "operation_started",
        operation_id=operation_id,
        operation=operation.value,
        template=template.name,
        state_root=str(state_root),
    )

    try:
        evaluate_prerequisites(
            template.prerequisites, operation, context.registry, context.runner
        )
    except Exception as e:
        logger.error(
            "operation_aborted",
            operation_id=operation_id,
            operation=operation.value,
            template=template.name,
            error=str(e),
        )
        raise

    errors: List[str] = []
    processed_items: List[str] = []
    skipped_items: List[str] = []
    failed_items: List[str] = []

    work = [(item, _process_registry_item) for item in template.registry]
    work += [(item, _process_file_item) for item in template.files]

    for item, process in work:
        if not item.action.applies_to(operation):
            logger.debug("item_not_applicable", item=item.name, action=item.action.value)
            continue

        try:
            done = process(item, operation, state_root, context)
        except Exception as e:
            errors.append(f"{item.name}: {str(e)}")
            failed_items.append(item.name)
            logger.error(
                "item_failed",
                operation_id=operation_id,
                item=item.name,
                error=str(e),
            )
            continue

        if done:
            processed_items.append(item.name)
        else:
            skipped_items.append(item.name)

    duration = (datetime.now(UTC) - start_time).total_seconds()

    result = OperationResult(
        operation_id=operation_id,
        operation=operation.value,
        template=template.name,
        processed_count=len(processed_items),
        skipped_count=len(skipped_items),
        failed_count=len(failed_items),
        errors=errors,
        duration_seconds=duration,
        processed_items=processed_items,
        skipped_items=skipped_items,
        failed_items=failed_items,
    )

    logger.info(
        "operation_completed",
        operation_id=operation_id,
        operation=operation.value,
        processed=result.processed_count,
        skipped=result.skipped_count,
        failed=result.failed_count,
        duration=duration,
    )
    return result


def run_backup(template: Template, state_root: Path, context: EngineContext) -> OperationResult:
    """
    Back up every applicable item of a template.

    Args:
        template: Parsed template
        state_root: State-files root to write into
        context: System capabilities

    Returns:
        OperationResult with per-item outcomes

    Raises:
        PrerequisiteError: If a prerequisite aborts the backup
    """
    return _run(template, Path(state_root), context, Operation.BACKUP)


def run_restore(template: Template, state_root: Path, context: EngineContext) -> OperationResult:
    """
    Restore every applicable item of a template.

    Args:
        template: Parsed template
        state_root: State-files root to read from
        context: System capabilities

    Returns:
        OperationResult with per-item outcomes

    Raises:
        PrerequisiteError: If a prerequisite aborts the restore
    """
    return _run(template, Path(state_root), context, Operation.RESTORE)
