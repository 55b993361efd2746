# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Filesystem paths for the vault and the catch configuration."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

ENV_VAULT_ROOT = "NOTECATCH_VAULT_ROOT"
CONFIG_FILENAME = "config.json"


def default_vault_root() -> Path:
    """Get the default vault root directory."""
    env_root = os.getenv(ENV_VAULT_ROOT)
    if env_root:
        return Path(env_root)
    return Path(user_data_dir("notecatch", "notecatch")) / "vault"


def default_config_file() -> Path:
    """Get the default location of the catch configuration file."""
    return Path(user_config_dir("notecatch", "notecatch")) / CONFIG_FILENAME


def validate_vault_path(path: Path, root: Path) -> Path:
    """Ensure path is within the vault root.

    Args:
        path: Path to validate
        root: Vault root directory

    Returns:
        Resolved path if valid

    Raises:
        ValueError: If path is outside the vault root
    """
    resolved = path.resolve()
    root_resolved = root.resolve()

    if resolved != root_resolved and root_resolved not in resolved.parents:
        raise ValueError(f"Path outside vault root: {path}")

    return resolved
