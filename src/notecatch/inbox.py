# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Turn a caught string into a new note in the inbox folder."""

from __future__ import annotations

import unicodedata
from typing import TYPE_CHECKING

from notecatch.defaults import ERROR_MARK, NOTE_SUFFIX, SUCCESS_MARK
from notecatch.errors import ConfigError, CreateError
from notecatch.logging import get_logger

if TYPE_CHECKING:
    from notecatch.notify import Notifier
    from notecatch.storage import VaultStorage

logger = get_logger(__name__)


def note_filename(raw_text: str) -> str:
    """Derive the note filename for ``raw_text``.

    Raises:
        CreateError: If the text cannot name a file inside the folder
    """
    if not raw_text.strip():
        raise CreateError(repr(raw_text), "Empty note name")
    if raw_text in (".", ".."):
        raise CreateError(raw_text, "Invalid note name")
    if "/" in raw_text or "\\" in raw_text:
        raise CreateError(raw_text, "Note name contains a path separator")
    if any(unicodedata.category(ch) == "Cc" for ch in raw_text):
        raise CreateError(repr(raw_text), "Note name contains control characters")
    return f"{raw_text}{NOTE_SUFFIX}"


def success_message(filename: str, folder: str) -> str:
    return f"{SUCCESS_MARK} '{filename}' created in '{folder}'"


def error_message(error: BaseException) -> str:
    return f"{ERROR_MARK} Error: {error}"


def is_error_message(message: str) -> bool:
    return message.startswith(ERROR_MARK)


class InboxWriter:
    """Create captured notes through the vault storage and report the outcome."""

    def __init__(self, storage: VaultStorage, notifier: Notifier) -> None:
        self._storage = storage
        self._notifier = notifier

    async def capture(self, raw_text: str, folder: str, template: str | None) -> str:
        """Create ``<folder>/<raw_text>.md`` with ``template`` as its body.

        Never raises: failures are folded into the returned message, which is
        also sent to the notifier.
        """
        try:
            message = await self._write(raw_text, folder, template or "")
        except (CreateError, ConfigError, OSError) as e:
            logger.warning("capture_failed", text=raw_text, folder=folder, error=str(e))
            message = error_message(e)
        self._notifier.notify(message)
        return message

    async def _write(self, raw_text: str, folder: str, body: str) -> str:
        filename = note_filename(raw_text)
        if not folder:
            raise ConfigError("No inbox folder configured")
        await self._storage.create_file(f"{folder}/{filename}", body)
        return success_message(filename, folder)
