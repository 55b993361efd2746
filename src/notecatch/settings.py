# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from notecatch.paths import default_config_file, default_vault_root


class Settings(BaseSettings):
    vault_root: Path = Field(default_factory=default_vault_root)
    config_file: Path = Field(default_factory=default_config_file)
    log_level: str = "WARNING"
    log_format: str = "console"

    model_config = SettingsConfigDict(
        env_prefix="NOTECATCH_",
        extra="ignore",
    )
