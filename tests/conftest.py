# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for WMR tests.

Provides an in-memory registry, a scripted process runner, an encoder,
and temporary state directories.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from cryptography.fernet import Fernet

from wmr.config import ItemMode, RegistryItemConfig
from wmr.encoding import FernetEncoder
from wmr.ops.process_fake import FakeProcessRunner
from wmr.ops.registry_fake import FakeRegistry

TEST_KEY_PATH = r"HKCU:\Software\WMRTest"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def state_root(temp_dir: Path) -> Path:
    """State-files root for one operation."""
    return temp_dir / "state"


@pytest.fixture
def registry() -> FakeRegistry:
    """Registry holding one test key with a string and a numeric value."""
    return FakeRegistry(
        {
            TEST_KEY_PATH: {
                "TestValue": "OriginalData",
                "NumericValue": 12345,
            }
        }
    )


@pytest.fixture
def runner() -> FakeProcessRunner:
    """Process runner with nothing scripted."""
    return FakeProcessRunner()


@pytest.fixture
def encoder() -> FernetEncoder:
    """Encoder with a fresh random key."""
    return FernetEncoder(Fernet.generate_key())


def value_item(
    key_name: str = "TestValue",
    encrypt: bool = False,
    value_data=None,
    path: str = TEST_KEY_PATH,
    state_path: str = "registry/test_value.json",
) -> RegistryItemConfig:
    """Build a value-mode registry item for the test key."""
    return RegistryItemConfig(
        name=f"Test {key_name}",
        path=path,
        dynamic_state_path=state_path,
        mode=ItemMode.VALUE,
        key_name=key_name,
        encrypt=encrypt,
        value_data=value_data,
    )


def key_item(
    path: str = TEST_KEY_PATH,
    encrypt: bool = False,
    state_path: str = "registry/test_key.json",
) -> RegistryItemConfig:
    """Build a key-mode registry item."""
    return RegistryItemConfig(
        name="Test Key",
        path=path,
        dynamic_state_path=state_path,
        mode=ItemMode.KEY,
        encrypt=encrypt,
    )
