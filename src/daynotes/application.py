# SPDX-License-Identifier: GPL-3.0-or-later

import logging

from gi.repository import Gio

from daynotes import __version__
from daynotes.blob_store import DirectoryBlobStore
from daynotes.cloud_merge import CloudMergeService
from daynotes.constants import APP_ID
from daynotes.day_record_store import DayRecordStore
from daynotes.settings import SyncConfig, get_settings

logger = logging.getLogger(__name__)


class DayNotesApp(Gio.Application):
    """Owns the day record store and its cloud mirror for the session.

    Runs as a held Gio.Application; 'sync-now' and 'quit' are exported as
    actions so other processes (the calendar window, gapplication) can
    trigger them. Activating the running instance also syncs.
    """

    def __init__(self, version=__version__, store=None, **kwargs):
        super().__init__(
            application_id=APP_ID,
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS,
            **kwargs,
        )
        self.version = version
        self.store = store
        self.sync_service = None
        self._settings = None

    def do_startup(self):
        Gio.Application.do_startup(self)
        self._settings = get_settings()
        config = SyncConfig.from_settings(self._settings)

        if self.store is None:
            self.store = DayRecordStore()
        self.store.connect('save-failed', self._on_save_failed)

        self.sync_service = CloudMergeService(
            self.store,
            DirectoryBlobStore(config.folder),
            enabled=config.enabled,
        )
        self.sync_service.connect('notify::sync-error', self._on_sync_error)
        self.sync_service.start_periodic_sync(config.interval_minutes * 60)

        if self._settings:
            self._settings.connect('changed', self._on_setting_changed)

        self._setup_actions()
        self.hold()
        logger.info('DayNotes %s started with %d day records', self.version, len(self.store))

    def _setup_actions(self):
        actions = [
            ('sync-now', self._on_sync_now, None),
            ('quit', self._on_quit, None),
        ]
        for name, callback, param_type in actions:
            action = Gio.SimpleAction.new(name, param_type)
            action.connect('activate', callback)
            self.add_action(action)

    def do_activate(self):
        self.sync_service.check_account_status()
        self.sync_service.sync()

    def do_shutdown(self):
        if self.sync_service is not None:
            self.sync_service.shutdown()
        Gio.Application.do_shutdown(self)

    def _on_sync_now(self, action, param):
        if not self.sync_service.sync():
            logger.info('Sync requested but cloud sync is disabled')

    def _on_quit(self, action, param):
        self.release()
        self.quit()

    def _on_setting_changed(self, settings, key):
        config = SyncConfig.from_settings(settings)
        if key == 'enable-cloud-sync':
            self.sync_service.enabled = config.enabled
        elif key == 'sync-folder':
            self.sync_service.set_blob_store(DirectoryBlobStore(config.folder))
        elif key == 'sync-interval-minutes':
            self.sync_service.start_periodic_sync(config.interval_minutes * 60)

    def _on_save_failed(self, store, message):
        logger.error('Day records are only kept in memory: %s', message)

    def _on_sync_error(self, service, pspec):
        if service.sync_error:
            logger.info('Cloud sync status: %s', service.sync_error)
