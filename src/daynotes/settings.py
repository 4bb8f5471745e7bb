# SPDX-License-Identifier: GPL-3.0-or-later

from dataclasses import dataclass

from gi.repository import Gio

from daynotes.constants import APP_ID, DEFAULT_SYNC_INTERVAL_MINUTES


def get_settings():
    """Return the app's Gio.Settings, or None when the schema isn't installed."""
    schema_source = Gio.SettingsSchemaSource.get_default()
    if schema_source and schema_source.lookup(APP_ID, True):
        return Gio.Settings.new(APP_ID)
    return None


@dataclass
class SyncConfig:
    enabled: bool = False
    folder: str = ''
    interval_minutes: int = DEFAULT_SYNC_INTERVAL_MINUTES

    @classmethod
    def from_settings(cls, settings):
        if settings is None:
            return cls()
        return cls(
            enabled=settings.get_boolean('enable-cloud-sync'),
            folder=settings.get_string('sync-folder'),
            interval_minutes=settings.get_int('sync-interval-minutes'),
        )
