# SPDX-License-Identifier: GPL-3.0-or-later

import collections
import json
import logging

from gi.repository import GLib, GObject

from daynotes.background import run_in_background
from daynotes.blob_store import AccountStatus, UnavailableBlobStore
from daynotes.day_record import DayRecord, to_utc, utc_now
from daynotes.errors import (
    DayNotesError,
    NotAvailableError,
    NotSignedInError,
    RecordDecodeError,
)

logger = logging.getLogger(__name__)


def encode_day_record(record) -> bytes:
    return json.dumps(record.to_dict(), ensure_ascii=False).encode('utf-8')


def decode_day_record(blob, key) -> DayRecord:
    """Decode a remote blob; the blob key is authoritative for the id."""
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise RecordDecodeError(f'Blob {key} is not valid JSON: {e}') from None
    if not isinstance(data, dict):
        raise RecordDecodeError(f'Blob {key} is not a JSON object')
    data['id'] = key
    return DayRecord.from_dict(data)


class CloudMergeService(GObject.Object):
    """Mirrors a DayRecordStore into a BlobStore.

    Remote copies are merged per day by last-write-wins on updated_at; a
    remote copy only replaces the local one when it is strictly newer.
    Failures never propagate to callers, they end up in sync-error.
    """

    enabled = GObject.Property(type=bool, default=False)
    is_available = GObject.Property(type=bool, default=False)
    is_signed_in = GObject.Property(type=bool, default=False)
    is_syncing = GObject.Property(type=bool, default=False)
    last_sync = GObject.Property(type=str, default='')
    sync_error = GObject.Property(type=str, default='')

    def __init__(self, store, blob_store=None, runner=run_in_background, enabled=False):
        super().__init__()
        self._store = store
        self._blob_store = blob_store or UnavailableBlobStore()
        self._runner = runner
        self._jobs = collections.deque()
        self._running = False
        self._timer_id = None
        self.enabled = enabled

        self._store_handlers = [
            store.connect('record-changed', self._on_record_changed),
            store.connect('day-removed', self._on_day_removed),
        ]
        self.connect('notify::enabled', self._on_enabled_changed)

    @property
    def blob_store(self):
        return self._blob_store

    def set_blob_store(self, blob_store):
        self._blob_store = blob_store or UnavailableBlobStore()
        self.check_account_status()

    # --- Remote operations ---

    def push(self, day_record):
        key = day_record.id
        blob = encode_day_record(day_record)

        def _upsert():
            self._require_account()
            self._blob_store.upsert(key, blob)

        self._start(_upsert, lambda result, error: self._on_done(error, f'push {key}'))

    def delete(self, remote_key):
        def _delete():
            self._require_account()
            self._blob_store.delete(remote_key)

        self._start(_delete, lambda result, error: self._on_done(error, f'delete {remote_key}'))

    def pull(self) -> list[DayRecord]:
        """Fetch every remote day record. Blocks; call it off the main loop."""
        self._require_account()
        records = []
        for key, blob in self._blob_store.fetch_all():
            try:
                records.append(decode_day_record(blob, key))
            except RecordDecodeError as e:
                logger.warning('Skipping remote day record %s: %s', key, e)
        logger.info('Fetched %d remote day records', len(records))
        return records

    def merge(self, remote_records) -> list[str]:
        winners = {}
        for remote in remote_records:
            key = remote.key
            current = winners.get(key) or self._store.get_record(key)
            if current is None or to_utc(remote.updated_at) > to_utc(current.updated_at):
                winners[key] = remote

        changed = self._store.replace_records(winners.values())
        if changed:
            logger.info('Merged %d remote day records: %s', len(changed), ', '.join(changed))
        return changed

    def sync(self) -> bool:
        """Pull in the background and merge the result on the main loop."""
        if not self.enabled:
            logger.debug('Cloud sync is disabled, not syncing')
            return False
        self._start(self.pull, self._on_pull_done)
        return True

    def check_account_status(self):
        self._runner(self._blob_store.account_status, self._on_account_status)

    # --- Scheduling ---

    def start_periodic_sync(self, seconds):
        self.stop_periodic_sync()
        if seconds <= 0:
            return
        self._timer_id = GLib.timeout_add_seconds(seconds, self._on_timer)

    def stop_periodic_sync(self):
        if self._timer_id is not None:
            GLib.source_remove(self._timer_id)
            self._timer_id = None

    def shutdown(self):
        self.stop_periodic_sync()
        for handler_id in self._store_handlers:
            self._store.disconnect(handler_id)
        self._store_handlers = []

    def _on_timer(self):
        self.sync()
        return GLib.SOURCE_CONTINUE

    # --- Helpers ---

    def _require_account(self):
        status = self._blob_store.account_status()
        if status is AccountStatus.AVAILABLE:
            return
        if status is AccountStatus.NO_ACCOUNT:
            raise NotSignedInError()
        if status is AccountStatus.COULD_NOT_DETERMINE:
            raise NotAvailableError('Could not determine the cloud account status')
        raise NotAvailableError()

    def _start(self, func, on_done):
        # Remote jobs run one at a time in submission order, so a delete
        # queued after a push for the same day always lands last.
        self._jobs.append((func, on_done))
        if not self.is_syncing:
            self.is_syncing = True
        if not self._running:
            self._run_next()

    def _run_next(self):
        if not self._jobs:
            self._running = False
            self.is_syncing = False
            return
        self._running = True
        func, on_done = self._jobs.popleft()

        def _finish(result, error):
            try:
                on_done(result, error)
            finally:
                self._run_next()

        self._runner(func, _finish)

    def _on_pull_done(self, records, error):
        if self._on_done(error, 'sync'):
            self.merge(records)

    def _on_done(self, error, what) -> bool:
        if error is None:
            self.is_available = True
            self.is_signed_in = True
            self.sync_error = ''
            self.last_sync = utc_now().isoformat()
            return True

        if isinstance(error, NotSignedInError):
            self.is_available = True
            self.is_signed_in = False
        elif isinstance(error, NotAvailableError):
            self.is_available = False
            self.is_signed_in = False

        if isinstance(error, DayNotesError):
            logger.warning('Cloud %s failed: %s', what, error)
        else:
            logger.warning('Cloud %s failed', what, exc_info=error)
        self.sync_error = str(error) or type(error).__name__
        return False

    def _on_account_status(self, status, error):
        if error is not None:
            logger.warning('Could not query the cloud account status: %s', error)
            status = AccountStatus.COULD_NOT_DETERMINE

        self.is_available = status in (AccountStatus.AVAILABLE, AccountStatus.NO_ACCOUNT)
        self.is_signed_in = status is AccountStatus.AVAILABLE
        if status is AccountStatus.AVAILABLE:
            self.sync_error = ''
        elif status is AccountStatus.NO_ACCOUNT:
            self.sync_error = str(NotSignedInError())
        elif status is AccountStatus.COULD_NOT_DETERMINE:
            self.sync_error = 'Could not determine the cloud account status'
        else:
            self.sync_error = str(NotAvailableError())

    def _on_record_changed(self, store, key):
        if not self.enabled:
            return
        record = store.get_record(key)
        if record is not None:
            self.push(record)

    def _on_day_removed(self, store, key, record_id):
        if self.enabled:
            self.delete(record_id)

    def _on_enabled_changed(self, obj, pspec):
        if self.enabled:
            self.sync()
