# SPDX-License-Identifier: GPL-3.0-or-later

import dataclasses
import json
import logging
import os

from gi.repository import GLib, GObject

from daynotes.constants import DATA_DIR_NAME, RECORDS_FILE_NAME
from daynotes.day_record import DayRecord, RecordItem, date_key, utc_now
from daynotes.errors import RecordDecodeError, StorageError

logger = logging.getLogger(__name__)


def default_records_path():
    override = os.environ.get('DAYNOTES_DATA_FILE')
    if override:
        return override
    return os.path.join(GLib.get_user_data_dir(), DATA_DIR_NAME, RECORDS_FILE_NAME)


class DayRecordStore(GObject.Object):
    """Day records keyed by YYYY-MM-DD, mirrored to a JSON file.

    Every mutation is written to disk before the change signals are
    emitted. All mutations must happen on the thread running the GLib main
    loop.
    """

    __gsignals__ = {
        'record-changed': (GObject.SignalFlags.RUN_LAST, None, (str,)),
        'day-removed': (GObject.SignalFlags.RUN_LAST, None, (str, str)),
        'records-replaced': (GObject.SignalFlags.RUN_LAST, None, ()),
        'save-failed': (GObject.SignalFlags.RUN_LAST, None, (str,)),
    }

    def __init__(self, path=None):
        super().__init__()
        if path is None:
            path = default_records_path()
        self._path = os.fspath(path)
        self._records = {}
        self.last_save_error = None
        self.load()

    @property
    def path(self):
        return self._path

    def __len__(self):
        return len(self._records)

    def __contains__(self, day):
        return date_key(day) in self._records

    # --- Queries ---

    def get_record(self, day) -> DayRecord | None:
        record = self._records.get(date_key(day))
        if record is None:
            return None
        return record.copy()

    def get_records(self, day) -> list[RecordItem]:
        record = self._records.get(date_key(day))
        if record is None:
            return []
        return record.copy().records

    def has_record(self, day) -> bool:
        record = self._records.get(date_key(day))
        return record is not None and record.has_records

    def record_count(self, day) -> int:
        record = self._records.get(date_key(day))
        return len(record.records) if record else 0

    def all_records(self) -> list[DayRecord]:
        return [self._records[key].copy() for key in sorted(self._records)]

    def dates_with_records(self, year, month) -> set[int]:
        """Days of the given month that have at least one non-blank note."""
        prefix = f'{year:04d}-{month:02d}-'
        return {
            record.date.day
            for key, record in self._records.items()
            if key.startswith(prefix) and record.has_records
        }

    # --- Mutations ---

    def add_record(self, day, content) -> RecordItem:
        # Blank content is accepted; it just doesn't count for has_record().
        key = date_key(day)
        now = utc_now()
        record = self._records.get(key)
        if record is None:
            record = DayRecord.new(key, now)
            self._records[key] = record
        item = RecordItem.new(content, now)
        record.records.append(item)
        record.touch(now)
        self._commit(key)
        return dataclasses.replace(item)

    def update_record(self, day, record_id, content) -> bool:
        key = date_key(day)
        record = self._records.get(key)
        item = record.find(record_id) if record else None
        if item is None:
            return False
        now = utc_now()
        item.set_content(content, now)
        record.touch(now)
        self._commit(key)
        return True

    def delete_record(self, day, record_id) -> bool:
        key = date_key(day)
        record = self._records.get(key)
        item = record.find(record_id) if record else None
        if item is None:
            return False
        record.records.remove(item)
        if record.records:
            record.touch()
            self._commit(key)
        else:
            del self._records[key]
            self._commit(key, removed=record)
        return True

    def delete_day(self, day) -> bool:
        key = date_key(day)
        record = self._records.pop(key, None)
        if record is None:
            return False
        self._commit(key, removed=record)
        return True

    def replace_records(self, records) -> list[str]:
        """Install whole day records, saving and notifying once.

        Used when merging remote copies. A record without items removes the
        day instead of leaving an empty entry behind.
        """
        keys = []
        for record in records:
            if record.records:
                self._records[record.key] = record.copy()
            else:
                self._records.pop(record.key, None)
            keys.append(record.key)
        if not keys:
            return keys
        self.save()
        self.emit('records-replaced')
        return keys

    def _commit(self, key, removed=None):
        self.save()
        self.emit('record-changed', key)
        if removed is not None:
            self.emit('day-removed', key, removed.id)

    # --- Persistence ---

    def load(self):
        self._records = {}
        if not os.path.exists(self._path):
            logger.info('No records file at %s, starting empty', self._path)
            return

        try:
            with open(self._path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning('Could not read %s, starting empty: %s', self._path, e)
            return

        if not isinstance(data, dict):
            logger.warning('Ignoring %s: expected a JSON object', self._path)
            return

        for key, raw in data.items():
            try:
                record = DayRecord.from_dict(raw)
            except RecordDecodeError as e:
                logger.warning('Skipping day record %s: %s', key, e)
                continue
            if not record.records:
                continue
            existing = self._records.get(record.key)
            if existing is None or record.updated_at > existing.updated_at:
                self._records[record.key] = record

        logger.info('Loaded %d day records from %s', len(self._records), self._path)
        self.emit('records-replaced')

    def save(self) -> bool:
        payload = {key: self._records[key].to_dict() for key in sorted(self._records)}
        try:
            self._write(json.dumps(payload, ensure_ascii=False, indent=2))
        except StorageError as e:
            self.last_save_error = str(e)
            logger.error('%s', e)
            self.emit('save-failed', str(e))
            return False
        self.last_save_error = None
        logger.debug('Saved %d day records to %s', len(payload), self._path)
        return True

    def _write(self, text):
        # file_set_contents writes a temporary file and renames it over the target.
        try:
            parent = os.path.dirname(self._path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            GLib.file_set_contents(self._path, text.encode('utf-8'))
        except (OSError, GLib.Error) as e:
            raise StorageError(f'Failed to save day records to {self._path}: {e}') from e
