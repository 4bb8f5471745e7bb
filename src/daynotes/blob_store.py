# SPDX-License-Identifier: GPL-3.0-or-later
"""
Remote key-value stores the day records are mirrored into.

A blob store keeps opaque bytes under string keys. Calls may block and are
made from worker threads, never from the GLib main loop.
"""

import enum
import logging
import os

from gi.repository import GLib

from daynotes.errors import BlobStoreError

logger = logging.getLogger(__name__)

BLOB_SUFFIX = '.json'


class AccountStatus(enum.Enum):
    AVAILABLE = 'available'
    NO_ACCOUNT = 'no-account'
    UNAVAILABLE = 'unavailable'
    COULD_NOT_DETERMINE = 'could-not-determine'


class BlobStore:

    def account_status(self) -> AccountStatus:
        raise NotImplementedError

    def upsert(self, key, blob):
        raise NotImplementedError

    def fetch_all(self, predicate=None) -> list[tuple[str, bytes]]:
        """Return (key, blob) pairs, limited to keys accepted by predicate."""
        raise NotImplementedError

    def delete(self, key):
        raise NotImplementedError


class UnavailableBlobStore(BlobStore):
    """Stand-in used when cloud sync is off; every call fails."""

    def account_status(self):
        return AccountStatus.UNAVAILABLE

    def upsert(self, key, blob):
        raise BlobStoreError('No cloud store configured')

    def fetch_all(self, predicate=None):
        raise BlobStoreError('No cloud store configured')

    def delete(self, key):
        raise BlobStoreError('No cloud store configured')


class DirectoryBlobStore(BlobStore):
    """Keeps each blob as <key>.json inside a folder.

    Point it at a directory that a file sync client (Nextcloud, Syncthing,
    ...) replicates to get cross-device sync.
    """

    def __init__(self, folder):
        self._folder = os.fspath(folder) if folder else ''

    @property
    def folder(self):
        return self._folder

    def account_status(self):
        if not self._folder:
            return AccountStatus.NO_ACCOUNT
        try:
            if not os.path.isdir(self._folder):
                return AccountStatus.UNAVAILABLE
            if not os.access(self._folder, os.R_OK | os.W_OK):
                return AccountStatus.UNAVAILABLE
        except OSError:
            return AccountStatus.COULD_NOT_DETERMINE
        return AccountStatus.AVAILABLE

    def upsert(self, key, blob):
        path = self._blob_path(key)
        try:
            GLib.file_set_contents(path, bytes(blob))
        except GLib.Error as e:
            raise BlobStoreError(f'Could not write {key}: {e.message}') from e

    def fetch_all(self, predicate=None):
        try:
            names = sorted(os.listdir(self._require_folder()))
        except OSError as e:
            raise BlobStoreError(f'Could not list {self._folder}: {e}') from e

        blobs = []
        for name in names:
            if not name.endswith(BLOB_SUFFIX) or name.startswith('.'):
                continue
            key = name[:-len(BLOB_SUFFIX)]
            if predicate is not None and not predicate(key):
                continue
            try:
                with open(os.path.join(self._folder, name), 'rb') as f:
                    blobs.append((key, f.read()))
            except OSError as e:
                logger.warning('Skipping unreadable blob %s: %s', name, e)
        return blobs

    def delete(self, key):
        try:
            os.remove(self._blob_path(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise BlobStoreError(f'Could not delete {key}: {e}') from e

    def _require_folder(self):
        if not self._folder:
            raise BlobStoreError('No sync folder configured')
        return self._folder

    def _blob_path(self, key):
        if not key or os.sep in key or key.startswith('.') or (os.altsep and os.altsep in key):
            raise BlobStoreError(f'Invalid blob key: {key!r}')
        return os.path.join(self._require_folder(), key + BLOB_SUFFIX)
