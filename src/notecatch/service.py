# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wiring and lifecycle for the catch components.

CatchService owns the config snapshot, the inbox writer and the single
capture listener. Config updates are compared field by field and the
listener is started, stopped or restarted to match.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from notecatch.config import CatchConfig, ConfigChange, ConfigStore
from notecatch.defaults import CONFIGURE_NOTICE
from notecatch.inbox import InboxWriter
from notecatch.listener import CaptureListener, ListenerState
from notecatch.logging import get_logger
from notecatch.storage import VaultStorage

if TYPE_CHECKING:
    from notecatch.notify import Notifier
    from notecatch.settings import Settings

logger = get_logger(__name__)


class CatchService:
    def __init__(
        self,
        store: ConfigStore,
        storage: VaultStorage,
        notifier: Notifier,
        listener: CaptureListener | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._writer = InboxWriter(storage, notifier)
        self._listener = listener or CaptureListener()
        self._config = CatchConfig()

    @classmethod
    def from_settings(cls, settings: Settings, notifier: Notifier) -> CatchService:
        return cls(ConfigStore(settings.config_file), VaultStorage(settings.vault_root), notifier)

    @property
    def config(self) -> CatchConfig:
        return self._config

    @property
    def listener(self) -> CaptureListener:
        return self._listener

    def load(self, config: CatchConfig | None = None) -> CatchConfig:
        """Take ``config`` (or the stored one) as the current snapshot."""
        self._config = config if config is not None else self._store.load()
        return self._config

    async def start(self, config: CatchConfig | None = None) -> None:
        """Load the config and bring the listener in line with it."""
        self.load(config)
        if not self._config.inbox_folder:
            self._notifier.notify(CONFIGURE_NOTICE)
        if self._config.webserver_enabled:
            await self._start_listener()

    async def catch(self, text: str) -> str:
        """Capture ``text`` into the configured inbox folder."""
        return await self._writer.capture(text, self._config.inbox_folder, self._config.template)

    async def update(self, **changes: Any) -> ConfigChange:
        """Apply option changes, persist them and react to the difference.

        Keyword names are CatchConfig field names.
        """
        unknown = set(changes) - set(CatchConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        after = CatchConfig.model_validate({**self._config.model_dump(), **changes})
        change = ConfigChange.between(self._config, after)
        self._store.save(after)
        self._config = after
        if change.changed_fields:
            logger.info("config_changed", fields=sorted(change.changed_fields))

        if change.webserver_toggled_on:
            await self._start_listener()
        elif change.webserver_toggled_off:
            await self._listener.stop()
        elif after.webserver_enabled and change.port_changed:
            await self._listener.stop()
            await self._start_listener()
        return change

    async def shutdown(self) -> None:
        if self._listener.state is ListenerState.RUNNING:
            await self._listener.stop()

    def status_line(self) -> str | None:
        if self._listener.state is not ListenerState.RUNNING:
            return None
        return f"Catch server [port {self._listener.port}]"

    async def _start_listener(self) -> bool:
        return await self._listener.start(self._config.listen_port, self.catch)
