# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR State Engine - Declarative backup and restore of machine configuration.

Captures registry values, registry keys and configuration files described
by templates into portable (optionally encrypted) state files, and replays
them to rebuild that configuration. Prerequisite checks gate each
operation. Package name: wmr.
"""

__version__ = "0.1.0"

# Template loading
from wmr.builder import Template, build_template, load_template

# Core runs
from wmr.core import (
    EngineContext,
    OperationResult,
    initialize_context,
    run_backup,
    run_restore,
)

# Engines
from wmr.prerequisites import evaluate_prerequisites
from wmr.state import (
    capture_file_state,
    capture_registry_state,
    replay_file_state,
    replay_registry_state,
)

# Environment-based configuration
from wmr.env import create_config_from_env

__all__ = [
    # Version
    "__version__",
    # Templates
    "Template",
    "build_template",
    "load_template",
    # Core orchestration
    "EngineContext",
    "OperationResult",
    "initialize_context",
    "run_backup",
    "run_restore",
    # Engines
    "evaluate_prerequisites",
    "capture_registry_state",
    "replay_registry_state",
    "capture_file_state",
    "replay_file_state",
    # Configuration
    "create_config_from_env",
]
