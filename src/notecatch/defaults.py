# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Centralized default values for notecatch."""

from __future__ import annotations

# Capture listener
LISTEN_HOST = "127.0.0.1"
DEFAULT_PORT = 8980
DEFAULT_PORT_STR = str(DEFAULT_PORT)
SUCCESS_BODY = "Success"
NOT_FOUND_BODY = "Not Found"

# Raw request path segment accepted by the capture route
MAX_SEGMENT_LENGTH = 80
SEGMENT_PATTERN = rf"^/[^/?&#]{{1,{MAX_SEGMENT_LENGTH}}}$"

# Notes
NOTE_SUFFIX = ".md"
VAULT_LEVEL_FOLDER = "/"
VAULT_LEVEL_LABEL = "/ (vault-level)"

# User-facing markers
SUCCESS_MARK = "✅"
ERROR_MARK = "\U0001f6ab"
CONFIGURE_MARK = "\U0001f6a9"
CONFIGURE_NOTICE = f"{CONFIGURE_MARK} Configure to get started..."
