# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Prerequisites - Gate backup and restore operations on system checks.

Each prerequisite is checked in list order. A failed check is handled by
its on_missing policy:

- warn: log a warning and continue
- fail_backup: abort a Backup operation, warn during Restore
- fail_restore: abort a Restore operation, warn during Backup

An abort raises PrerequisiteError immediately; later prerequisites are
not checked. A check that raises (missing program, unreadable registry)
counts as a failed check.
"""

import re
from typing import Iterable

import structlog

from wmr.config import (
    ApplicationPrerequisite,
    Operation,
    Prerequisite,
    RegistryPrerequisite,
    ScriptPrerequisite,
    Scalar,
)
from wmr.errors import explain_prerequisite_failed
from wmr.exceptions import PrerequisiteError
from wmr.ops.process import ProcessResult, ProcessRunner
from wmr.ops.registry import RegistryAccessor
from wmr.paths import expand_path

logger = structlog.get_logger()


def _output_matches(result: ProcessResult, pattern: str) -> bool:
    """True if the process succeeded and its output contains pattern."""
    return result.succeeded and re.search(pattern, result.output) is not None


def _as_text(value: Scalar) -> str:
    if isinstance(value, list):
        return "\n".join(str(v) for v in value)
    return str(value)


def _check_application(prereq: ApplicationPrerequisite, runner: ProcessRunner) -> bool:
    result = runner.run_command(prereq.check_command)
    return _output_matches(result, prereq.expected_output)


def _check_registry(prereq: RegistryPrerequisite, registry: RegistryAccessor) -> bool:
    if not registry.key_exists(prereq.path):
        return False
    if prereq.key_name is None:
        return True
    if not registry.value_exists(prereq.path, prereq.key_name):
        return False
    if prereq.expected_value is None:
        return True

    actual = registry.get_value(prereq.path, prereq.key_name)
    return _as_text(actual) == _as_text(prereq.expected_value)


def _check_script(prereq: ScriptPrerequisite, runner: ProcessRunner) -> bool:
    if prereq.path:
        result = runner.run_script_file(expand_path(prereq.path))
    else:
        result = runner.run_script(prereq.inline_script)
    if prereq.expected_output is None:
        return result.succeeded
    return _output_matches(result, prereq.expected_output)


def check_prerequisite(
    prereq: Prerequisite,
    registry: RegistryAccessor,
    runner: ProcessRunner,
) -> bool:
    """
    Run a single prerequisite check.

    Exceptions raised by the registry or process layer propagate;
    evaluate_prerequisites() turns them into failed checks.

    Args:
        prereq: Prerequisite descriptor
        registry: Registry accessor
        runner: Process runner

    Returns:
        True if the check passed
    """
    if isinstance(prereq, ApplicationPrerequisite):
        return _check_application(prereq, runner)
    if isinstance(prereq, RegistryPrerequisite):
        return _check_registry(prereq, registry)
    if isinstance(prereq, ScriptPrerequisite):
        return _check_script(prereq, runner)
    raise TypeError(f"Unsupported prerequisite type: {type(prereq).__name__}")


def evaluate_prerequisites(
    prerequisites: Iterable[Prerequisite],
    operation: Operation | str,
    registry: RegistryAccessor,
    runner: ProcessRunner,
) -> bool:
    """
    Evaluate prerequisites for an operation.

    Args:
        prerequisites: Descriptors, checked in order
        operation: Operation being gated (Backup or Restore)
        registry: Registry accessor
        runner: Process runner

    Returns:
        True when no prerequisite aborted the operation

    Raises:
        PrerequisiteError: When a failed prerequisite's policy aborts
            this operation
    """
    operation = Operation(operation)

    for prereq in prerequisites:
        try:
            passed = check_prerequisite(prereq, registry, runner)
        except Exception as e:
            logger.warning(
                "prerequisite_check_error",
                name=prereq.name,
                error=str(e),
            )
            passed = False

        if passed:
            logger.debug("prerequisite_passed", name=prereq.name)
            continue

        if prereq.on_missing.aborts(operation):
            message = explain_prerequisite_failed(
                prereq.name, operation.value, prereq.on_missing.value
            )
            logger.error(
                "prerequisite_failed",
                name=prereq.name,
                operation=operation.value,
                policy=prereq.on_missing.value,
            )
            raise PrerequisiteError(
                message,
                details={
                    "name": prereq.name,
                    "operation": operation.value,
                    "policy": prereq.on_missing.value,
                },
            )

        logger.warning(
            "prerequisite_not_met",
            name=prereq.name,
            operation=operation.value,
            policy=prereq.on_missing.value,
        )

    return True
