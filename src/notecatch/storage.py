# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Vault storage: exclusive note creation and folder enumeration."""

from __future__ import annotations

import asyncio
from pathlib import Path

from notecatch.defaults import VAULT_LEVEL_FOLDER, VAULT_LEVEL_LABEL
from notecatch.errors import CreateError
from notecatch.logging import get_logger
from notecatch.paths import validate_vault_path

logger = get_logger(__name__)


class VaultStorage:
    """Files under a vault root, addressed by ``/``-separated relative paths."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def resolve(self, path: str) -> Path:
        """Map a vault-relative path to a filesystem path inside the root.

        Raises:
            CreateError: If a folder component is empty or the path escapes the root
        """
        # Leading slashes address the vault level ("/" folder, "/Inbox").
        parts = path.lstrip("/").split("/")
        if any(part == "" for part in parts):
            raise CreateError(path, "Folder does not exist")
        try:
            return validate_vault_path(self.root.joinpath(*parts), self.root)
        except ValueError as e:
            raise CreateError(path, "Path outside vault") from e

    async def create_file(self, path: str, content: str) -> Path:
        """Create a new file with ``content``; never overwrites.

        Raises:
            CreateError: If the file exists, its folder is missing, or the write fails
        """
        target = self.resolve(path)
        await asyncio.to_thread(self._create, path, target, content)
        logger.info("note_created", path=path)
        return target

    def _create(self, path: str, target: Path, content: str) -> None:
        if not target.parent.is_dir():
            raise CreateError(path, "Folder does not exist")
        try:
            handle = target.open("x", encoding="utf-8")
        except FileExistsError as e:
            raise CreateError(path, "File already exists") from e
        except OSError as e:
            raise CreateError(path, e.strerror or str(e)) from e
        try:
            with handle:
                handle.write(content)
        except (OSError, ValueError) as e:
            # The file exists from the exclusive open; drop the partial note.
            target.unlink(missing_ok=True)
            raise CreateError(path, f"Cannot write note ({e})") from e

    def root_folders(self) -> dict[str, str]:
        """Top-level folders as ``{"/<path>": "<name>"}``, vault level first."""
        folders = {VAULT_LEVEL_FOLDER: VAULT_LEVEL_LABEL}
        if not self.root.is_dir():
            return folders
        for entry in sorted(self.root.iterdir(), key=lambda p: p.name.lower()):
            if entry.is_dir() and not entry.name.startswith("."):
                folders[f"/{entry.name}"] = entry.name
        return folders
