# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Registry State Tests.

These tests verify capture and replay of registry items:
1. Value items - verbatim storage, encryption, type preservation
2. Key items - whole-key capture and additive replay
3. Absent sources - missing keys and missing state files never raise
"""

import json
import re
from pathlib import Path

import pytest
from cryptography.fernet import Fernet
from structlog.testing import capture_logs

from wmr.encoding import FernetEncoder
from wmr.exceptions import ConfigurationError, EncodingError, StateFileError
from wmr.ops.registry_fake import FakeRegistry
from wmr.state.registry_state import (
    CapturedRegistryState,
    capture_registry_state,
    replay_registry_state,
)
from tests.conftest import TEST_KEY_PATH, key_item, value_item


def _read(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


# ============================================================================
# Value capture
# ============================================================================

def test_capture_value_stores_raw_value_verbatim(registry, state_root: Path):
    """Without encryption the stored Value equals the live value."""
    state = capture_registry_state(value_item(), state_root, registry)

    assert state is not None
    record = _read(state_root / "registry" / "test_value.json")
    assert record["Name"] == "Test TestValue"
    assert record["Path"] == TEST_KEY_PATH
    assert record["KeyName"] == "TestValue"
    assert record["Type"] == "value"
    assert record["Value"] == "OriginalData"
    assert "Values" not in record


def test_capture_value_preserves_integer_type(registry, state_root: Path):
    capture_registry_state(value_item("NumericValue"), state_root, registry)

    record = _read(state_root / "registry" / "test_value.json")
    assert record["Value"] == 12345
    assert isinstance(record["Value"], int)
    assert record["ValueType"] == "integer"


def test_capture_returns_in_memory_record(registry, state_root: Path):
    state = capture_registry_state(value_item(), state_root, registry)

    assert state.to_record() == _read(state_root / "registry" / "test_value.json")


def test_capture_missing_path_returns_none_and_writes_nothing(state_root: Path):
    """A missing key is reported, not raised, and leaves no state file."""
    registry = FakeRegistry()

    with capture_logs() as logs:
        state = capture_registry_state(value_item(), state_root, registry)

    assert state is None
    assert not (state_root / "registry" / "test_value.json").exists()
    assert any(
        log["event"] == "registry_path_missing" and log["log_level"] == "warning"
        for log in logs
    )


def test_capture_missing_value_under_existing_key_returns_none(registry, state_root: Path):
    state = capture_registry_state(value_item("DoesNotExist"), state_root, registry)

    assert state is None
    assert not (state_root / "registry" / "test_value.json").exists()


def test_capture_overwrites_existing_state_file(registry, state_root: Path):
    target = state_root / "registry" / "test_value.json"
    target.parent.mkdir(parents=True)
    target.write_text('{"stale": true}', encoding="utf-8")

    capture_registry_state(value_item(), state_root, registry)

    assert "stale" not in _read(target)


# ============================================================================
# Encryption
# ============================================================================

def test_encrypted_capture_stores_encoded_text(registry, state_root: Path, encoder):
    """Encrypted values are stored as Base64-like text, not the plaintext."""
    capture_registry_state(value_item(encrypt=True), state_root, registry, encoder)

    stored = _read(state_root / "registry" / "test_value.json")["Value"]
    assert isinstance(stored, str)
    assert stored != "OriginalData"
    assert re.fullmatch(r"[A-Za-z0-9_\-]+=*", stored)
    assert encoder.unprotect(stored) == b"OriginalData"


@pytest.mark.parametrize(
    "value",
    ["OriginalData", "", "ünïcödé ✓", 12345, 0, True, ["one", "two"]],
)
def test_encrypted_round_trip_restores_exact_value(state_root: Path, encoder, value):
    source = FakeRegistry({TEST_KEY_PATH: {"TestValue": value}})
    capture_registry_state(value_item(encrypt=True), state_root, source, encoder)

    destination = FakeRegistry()
    replay_registry_state(value_item(encrypt=True), state_root, destination, encoder)

    restored = destination.get_value(TEST_KEY_PATH, "TestValue")
    assert restored == value
    assert type(restored) is type(value)


def test_encrypted_capture_without_encoder_raises(registry, state_root: Path):
    with pytest.raises(ConfigurationError):
        capture_registry_state(value_item(encrypt=True), state_root, registry)


def test_replay_with_wrong_key_raises_encoding_error(registry, state_root: Path, encoder):
    capture_registry_state(value_item(encrypt=True), state_root, registry, encoder)
    other = FernetEncoder(Fernet.generate_key())

    with pytest.raises(EncodingError):
        replay_registry_state(value_item(encrypt=True), state_root, FakeRegistry(), other)


def test_replay_encrypted_item_rejects_non_text_value(state_root: Path, encoder):
    source = FakeRegistry({TEST_KEY_PATH: {"TestValue": 7}})
    capture_registry_state(value_item(), state_root, source)

    with pytest.raises(EncodingError):
        replay_registry_state(value_item(encrypt=True), state_root, FakeRegistry(), encoder)


# ============================================================================
# Key capture and replay
# ============================================================================

def test_key_capture_records_every_value_with_types(registry, state_root: Path):
    state = capture_registry_state(key_item(), state_root, registry)

    assert state.values == {"TestValue": "OriginalData", "NumericValue": 12345}
    record = _read(state_root / "registry" / "test_key.json")
    assert record["Type"] == "key"
    assert record["KeyName"] is None
    assert record["Values"] == {"TestValue": "OriginalData", "NumericValue": 12345}
    assert isinstance(record["Values"]["NumericValue"], int)
    assert "Value" not in record


def test_key_capture_ignores_encrypt_flag(registry, state_root: Path):
    """Whole-key capture stores raw values even when encrypt is set."""
    capture_registry_state(key_item(encrypt=True), state_root, registry)

    record = _read(state_root / "registry" / "test_key.json")
    assert record["Values"]["TestValue"] == "OriginalData"


def test_key_replay_onto_fresh_key_reproduces_values(registry, state_root: Path):
    capture_registry_state(key_item(), state_root, registry)

    destination = FakeRegistry()
    assert replay_registry_state(key_item(), state_root, destination) is True

    assert destination.list_values(TEST_KEY_PATH) == {
        "TestValue": "OriginalData",
        "NumericValue": 12345,
    }


def test_key_replay_leaves_unrelated_values_untouched(registry, state_root: Path):
    capture_registry_state(key_item(), state_root, registry)

    destination = FakeRegistry(
        {TEST_KEY_PATH: {"Unrelated": "keep me", "TestValue": "old"}}
    )
    replay_registry_state(key_item(), state_root, destination)

    assert destination.list_values(TEST_KEY_PATH) == {
        "Unrelated": "keep me",
        "TestValue": "OriginalData",
        "NumericValue": 12345,
    }


# ============================================================================
# Replay without state
# ============================================================================

def test_replay_missing_state_writes_default(state_root: Path):
    destination = FakeRegistry()

    written = replay_registry_state(value_item(value_data="Fallback"), state_root, destination)

    assert written is True
    assert destination.get_value(TEST_KEY_PATH, "TestValue") == "Fallback"


def test_replay_missing_state_without_default_writes_nothing(state_root: Path):
    destination = FakeRegistry()

    with capture_logs() as logs:
        written = replay_registry_state(value_item(), state_root, destination)

    assert written is False
    assert destination.writes == []
    assert any(log["event"] == "state_file_missing" for log in logs)


def test_replay_missing_key_state_does_not_create_key(state_root: Path):
    destination = FakeRegistry()

    replay_registry_state(key_item(), state_root, destination)

    assert not destination.key_exists(TEST_KEY_PATH)


def test_replay_unreadable_state_falls_back_to_default(state_root: Path):
    target = state_root / "registry" / "test_value.json"
    target.parent.mkdir(parents=True)
    target.write_text('{"Name": "truncated', encoding="utf-8")
    destination = FakeRegistry()

    replay_registry_state(value_item(value_data=1), state_root, destination)

    assert destination.get_value(TEST_KEY_PATH, "TestValue") == 1


def test_replay_value_creates_missing_key_path(registry, state_root: Path):
    capture_registry_state(value_item(), state_root, registry)
    destination = FakeRegistry()

    replay_registry_state(value_item(), state_root, destination)

    assert destination.key_exists(TEST_KEY_PATH)
    assert destination.get_value(TEST_KEY_PATH, "TestValue") == "OriginalData"


# ============================================================================
# Record shape
# ============================================================================

def test_record_round_trip_through_from_record(registry, state_root: Path):
    state = capture_registry_state(key_item(), state_root, registry)

    assert CapturedRegistryState.from_record(state.to_record()) == state


def test_value_record_without_value_is_rejected(state_root: Path):
    target = state_root / "registry" / "test_value.json"
    target.parent.mkdir(parents=True)
    target.write_text(
        json.dumps({"Name": "x", "Path": TEST_KEY_PATH, "KeyName": "TestValue", "Type": "value", "Value": None}),
        encoding="utf-8",
    )
    destination = FakeRegistry()

    with pytest.raises(StateFileError, match="missing its Value"):
        replay_registry_state(value_item(), state_root, destination)

    assert destination.writes == []
