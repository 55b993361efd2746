# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception hierarchy for notecatch."""

from __future__ import annotations


class CatchError(Exception):
    """Base exception for notecatch errors."""


class BindError(CatchError):
    """The capture listener could not bind its port."""

    def __init__(self, port: int, reason: str) -> None:
        self.port = port
        self.reason = reason
        super().__init__(f"cannot listen on port {port}: {reason}")


class CreateError(CatchError):
    """A note file could not be created."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class ConfigError(CatchError):
    """Configuration is missing or unusable."""
