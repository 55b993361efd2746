# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Notification sinks for short status messages."""

from __future__ import annotations

from typing import Protocol

import click

from notecatch.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class EchoNotifier:
    """Print each message on stderr."""

    def notify(self, message: str) -> None:
        click.echo(message, err=True)


class LogNotifier:
    """Send each message to the log instead of the terminal."""

    def notify(self, message: str) -> None:
        logger.info("notice", message=message)
