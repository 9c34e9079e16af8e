# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for WMR.

These helpers centralize wording for common failures so that
all modules present consistent, actionable messages.
"""


def explain_prerequisite_failed(name: str, operation: str, policy: str) -> str:
    """
    Explain that a prerequisite with a hard policy stopped an operation.
    """

    return (
        f"Prerequisite '{name}' failed. "
        f"Cannot proceed with {operation} operation as '{policy}' is set."
    )


def explain_missing_encoder(item_name: str) -> str:
    """
    Explain that an item asks for encryption but no encoder is available.
    """

    return (
        f"Item '{item_name}' has encrypt: true but no encoder is configured. "
        "Set WMR_ENCRYPTION_KEY_PATH or WMR_ENCRYPTION_PASSPHRASE, "
        "or pass encoder=... explicitly."
    )


def explain_missing_machine_path_env() -> str:
    """
    Explain that the machine backup path environment variable is missing.
    """

    return (
        "Machine backup path is not configured. "
        "Set the WMR_MACHINE_BACKUP_PATH environment variable or pass "
        "machine_backup_path=... to WMRConfig()."
    )


def explain_invalid_state_path(relative: str) -> str:
    """
    Explain that a dynamic_state_path points outside the state-files root.
    """

    return (
        f"Invalid dynamic_state_path: {relative!r}. "
        "It must be a relative path that stays inside the state-files root."
    )


def explain_invalid_enum(field: str, value: object, allowed: list[str]) -> str:
    """
    Explain that a template field holds a value outside its allowed set.
    """

    return (
        f"Invalid {field} value: {value!r}. "
        f"Expected one of: {', '.join(repr(a) for a in allowed)}."
    )


def explain_missing_field(section: str, index: int, field: str) -> str:
    """
    Explain that a template entry lacks a required field.
    """

    return f"Entry {index} of '{section}' is missing required field '{field}'."


def explain_bad_token() -> str:
    """
    Explain that stored data could not be decoded with the current key.
    """

    return (
        "Encrypted state could not be decoded. "
        "The data is corrupt or was protected with a different key."
    )
