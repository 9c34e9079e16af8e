# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Registry State - Capture and replay of registry items.

Capture reads one registry item (a single named value, or every value
directly under a key) and stores it as a JSON record at the item's
dynamic_state_path. Replay reads that record back and writes the values
to the registry.

A missing registry key on capture, or a missing state file on replay, is
not an error: the item may be intentionally absent on this machine. Both
are reported as warnings and the call returns without writing anything
(except a configured value_data default on replay).

Record layout:

    value item: {"Name", "Path", "KeyName", "Type": "value", "Value", "ValueType"}
    key item:   {"Name", "Path", "KeyName": null, "Type": "key", "Values": {...}}

When an item is encrypted, Value holds the encoder's text and ValueType
records the original Python type so replay restores it exactly.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import structlog

from wmr.config import ItemMode, RegistryItemConfig, Scalar
from wmr.encoding import Encoder
from wmr.errors import explain_missing_encoder
from wmr.exceptions import ConfigurationError, EncodingError, StateFileError
from wmr.ops.registry import RegistryAccessor
from wmr.state.store import read_state_file, state_file_path, write_state_file

logger = structlog.get_logger()


def _value_type(value: Scalar) -> str:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, list):
        return "list"
    return "string"


def _scalar_to_text(value: Scalar) -> str:
    """Text form of a scalar: strings verbatim, everything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _text_to_scalar(text: str, value_type: str | None) -> Scalar:
    if value_type in (None, "string"):
        return text
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise EncodingError(
            f"Decoded value is not a valid {value_type}: {e}",
            details={"value_type": value_type},
        )


@dataclass(frozen=True)
class CapturedRegistryState:
    """Captured state of one registry item."""

    name: str
    path: str
    type: ItemMode
    key_name: str | None = None

    # VALUE items: the stored scalar (encoded text when encrypted)
    value: Scalar | None = None
    value_type: str | None = None

    # KEY items: every value directly under the key
    values: Dict[str, Scalar] | None = None

    def __post_init__(self) -> None:
        if self.type is ItemMode.VALUE and (self.values is not None or not self.key_name):
            raise StateFileError(
                "Value state must carry KeyName and Value only",
                details={"name": self.name},
            )
        if self.type is ItemMode.KEY and (self.values is None or self.value is not None):
            raise StateFileError(
                "Key state must carry Values only",
                details={"name": self.name},
            )

    def to_record(self) -> Dict[str, Any]:
        """Return the JSON record written to the state file."""
        record: Dict[str, Any] = {
            "Name": self.name,
            "Path": self.path,
            "KeyName": self.key_name,
            "Type": self.type.value,
        }
        if self.type is ItemMode.VALUE:
            record["Value"] = self.value
            record["ValueType"] = self.value_type
        else:
            record["Values"] = self.values
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CapturedRegistryState":
        """
        Build a state from a decoded state file.

        Raises:
            StateFileError: If the record does not have the expected shape
        """
        try:
            item_type = ItemMode(record.get("Type"))
        except ValueError:
            raise StateFileError(
                f"Unknown state Type: {record.get('Type')!r}",
                details={"name": record.get("Name")},
            )

        values = record.get("Values")
        if item_type is ItemMode.KEY and not isinstance(values, dict):
            raise StateFileError(
                "Key state is missing its Values mapping",
                details={"name": record.get("Name")},
            )

        if item_type is ItemMode.VALUE and record.get("Value") is None:
            raise StateFileError(
                "Value state is missing its Value",
                details={"name": record.get("Name")},
            )

        return cls(
            name=record.get("Name", ""),
            path=record.get("Path", ""),
            type=item_type,
            key_name=record.get("KeyName"),
            value=record.get("Value") if item_type is ItemMode.VALUE else None,
            value_type=record.get("ValueType"),
            values=values if item_type is ItemMode.KEY else None,
        )


def _require_encoder(config: RegistryItemConfig, encoder: Encoder | None) -> Encoder:
    if encoder is None:
        raise ConfigurationError(
            explain_missing_encoder(config.name),
            details={"item": config.name},
        )
    return encoder


def capture_registry_state(
    config: RegistryItemConfig,
    state_root: Path,
    registry: RegistryAccessor,
    encoder: Encoder | None = None,
) -> CapturedRegistryState | None:
    """
    Capture one registry item into its state file.

    Args:
        config: Registry item descriptor
        state_root: State-files root for this operation
        registry: Registry accessor
        encoder: Encoder for items with encrypt=True

    Returns:
        The captured state, or None if the key (or value) does not exist

    Raises:
        ConfigurationError: If a value item needs encryption and no encoder was given
        StateFileError: If the state file cannot be written
    """
    is_value = config.mode is ItemMode.VALUE
    if is_value and config.encrypt:
        encoder = _require_encoder(config, encoder)

    if not registry.key_exists(config.path):
        logger.warning("registry_path_missing", item=config.name, path=config.path)
        return None

    if is_value:
        if not registry.value_exists(config.path, config.key_name):
            logger.warning(
                "registry_value_missing",
                item=config.name,
                path=config.path,
                key_name=config.key_name,
            )
            return None

        value = registry.get_value(config.path, config.key_name)
        stored = value
        if config.encrypt:
            stored = encoder.protect(_scalar_to_text(value).encode("utf-8"))

        state = CapturedRegistryState(
            name=config.name,
            path=config.path,
            type=ItemMode.VALUE,
            key_name=config.key_name,
            value=stored,
            value_type=_value_type(value),
        )
    else:
        if config.encrypt:
            # Whole-key capture stores every value raw
            logger.debug("key_encryption_ignored", item=config.name, path=config.path)

        state = CapturedRegistryState(
            name=config.name,
            path=config.path,
            type=ItemMode.KEY,
            values=registry.list_values(config.path),
        )

    target = state_file_path(state_root, config.dynamic_state_path)
    write_state_file(target, state.to_record())

    logger.info(
        "registry_state_captured",
        item=config.name,
        type=state.type.value,
        state_file=str(target),
        encrypted=bool(is_value and config.encrypt),
    )
    return state


def replay_registry_state(
    config: RegistryItemConfig,
    state_root: Path,
    registry: RegistryAccessor,
    encoder: Encoder | None = None,
) -> bool:
    """
    Replay one registry item from its state file.

    Key state is merged into the destination key: values present in the
    state are written, other existing values are left untouched.

    Args:
        config: Registry item descriptor
        state_root: State-files root for this operation
        registry: Registry accessor
        encoder: Encoder for items with encrypt=True

    Returns:
        True if anything was written to the registry, False if the state
        file was absent and there was no default to fall back on

    Raises:
        EncodingError: If encrypted state cannot be decoded
        StateFileError: If the state file has an unexpected shape
    """
    source = state_file_path(state_root, config.dynamic_state_path)
    record = read_state_file(source)

    if record is None:
        if config.mode is ItemMode.VALUE and config.value_data is not None:
            registry.set_value(config.path, config.key_name, config.value_data)
            logger.info(
                "registry_default_applied",
                item=config.name,
                path=config.path,
                key_name=config.key_name,
            )
            return True

        logger.warning("state_file_missing", item=config.name, state_file=str(source))
        return False

    state = CapturedRegistryState.from_record(record)

    if state.type is ItemMode.VALUE:
        value = state.value
        if config.encrypt:
            encoder = _require_encoder(config, encoder)
            if not isinstance(value, str):
                raise EncodingError(
                    "Encrypted state Value is not encoded text",
                    details={"item": config.name, "state_file": str(source)},
                )
            try:
                text = encoder.unprotect(value).decode("utf-8")
            except UnicodeDecodeError as e:
                raise EncodingError(
                    f"Decoded value is not UTF-8 text: {e}",
                    details={"item": config.name},
                )
            value = _text_to_scalar(text, state.value_type)

        key_name = config.key_name or state.key_name
        registry.set_value(config.path, key_name, value)
        logger.info(
            "registry_state_replayed",
            item=config.name,
            type=state.type.value,
            key_name=key_name,
        )
        return True

    for name, value in state.values.items():
        registry.set_value(config.path, name, value)
        logger.debug("registry_value_replayed", item=config.name, name=name)

    logger.info(
        "registry_state_replayed",
        item=config.name,
        type=state.type.value,
        value_count=len(state.values),
    )
    return True
