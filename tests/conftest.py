# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures."""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING

import pytest

from notecatch.config import ConfigStore
from notecatch.inbox import InboxWriter
from notecatch.storage import VaultStorage

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


def free_port() -> int:
    """Ask the OS for a loopback port that is currently unused."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Vault root with an Inbox and an Archive folder."""
    root = tmp_path / "vault"
    (root / "Inbox").mkdir(parents=True)
    (root / "Archive").mkdir()
    return root


@pytest.fixture
def storage(vault: Path) -> VaultStorage:
    return VaultStorage(vault)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def writer(storage: VaultStorage, notifier: RecordingNotifier) -> InboxWriter:
    return InboxWriter(storage, notifier)


@pytest.fixture
def config_store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "config" / "config.json")


@pytest.fixture
def port() -> int:
    return free_port()


@pytest.fixture
def port_factory() -> Callable[[], int]:
    """Draw further free ports once earlier ones are bound."""
    return free_port
