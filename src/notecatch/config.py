# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Catch configuration: the four user-facing options and their store.

The JSON file keeps the camelCase keys used by the original settings
blob (``port``, ``inboxFolder``, ``webserverEnabled``, ``template``).
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from notecatch.defaults import DEFAULT_PORT, DEFAULT_PORT_STR
from notecatch.logging import get_logger

logger = get_logger(__name__)


def parse_port(value: str | int | None) -> int:
    """Interpret a configured port, falling back to 8980 when not numeric."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return DEFAULT_PORT


class CatchConfig(BaseModel):
    """Immutable snapshot of the catch options."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    port: str = DEFAULT_PORT_STR
    inbox_folder: str = Field(
        default="",
        validation_alias=AliasChoices("inboxFolder", "inbox_folder"),
        serialization_alias="inboxFolder",
    )
    webserver_enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("webserverEnabled", "webserver", "webserver_enabled"),
        serialization_alias="webserverEnabled",
    )
    template: str = ""

    @field_validator("port", mode="before")
    @classmethod
    def _port_as_string(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def listen_port(self) -> int:
        return parse_port(self.port)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class ConfigChange:
    """Typed before/after comparison of two config snapshots."""

    before: CatchConfig
    after: CatchConfig
    changed_fields: frozenset[str]

    @classmethod
    def between(cls, before: CatchConfig, after: CatchConfig) -> ConfigChange:
        changed = frozenset(
            name for name in CatchConfig.model_fields if getattr(before, name) != getattr(after, name)
        )
        return cls(before=before, after=after, changed_fields=changed)

    @property
    def webserver_toggled_on(self) -> bool:
        return not self.before.webserver_enabled and self.after.webserver_enabled

    @property
    def webserver_toggled_off(self) -> bool:
        return self.before.webserver_enabled and not self.after.webserver_enabled

    @property
    def port_changed(self) -> bool:
        return self.before.listen_port != self.after.listen_port


class ConfigStore:
    """Load and save :class:`CatchConfig` as a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> CatchConfig:
        """Read the stored config, falling back to defaults.

        A missing file yields defaults silently; an unreadable or invalid
        one is logged and also yields defaults.
        """
        if not self.path.exists():
            return CatchConfig()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("config root must be an object")
            return CatchConfig.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("config_load_failed", path=str(self.path), error=str(e))
            return CatchConfig()

    def save(self, config: CatchConfig) -> None:
        """Write the config atomically (temp file + replace)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(config.to_json_dict(), indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("config_saved", path=str(self.path))
