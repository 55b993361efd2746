# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Catch short ideas into a notes inbox from the CLI or a local hotkey client."""

__version__ = "0.1.0"
