# SPDX-License-Identifier: GPL-3.0-or-later

import pytest

from daynotes.blob_store import AccountStatus, BlobStore
from daynotes.day_record_store import DayRecordStore
from daynotes.errors import BlobStoreError


class InMemoryBlobStore(BlobStore):

    def __init__(self, status=AccountStatus.AVAILABLE):
        self.status = status
        self.blobs = {}
        self.fail_writes = False
        self.upserts = []
        self.deletes = []

    def account_status(self):
        return self.status

    def upsert(self, key, blob):
        if self.fail_writes:
            raise BlobStoreError('quota exceeded')
        self.upserts.append(key)
        self.blobs[key] = bytes(blob)

    def fetch_all(self, predicate=None):
        return [
            (key, blob) for key, blob in sorted(self.blobs.items())
            if predicate is None or predicate(key)
        ]

    def delete(self, key):
        if self.fail_writes:
            raise BlobStoreError('quota exceeded')
        self.deletes.append(key)
        self.blobs.pop(key, None)


def inline_runner(func, on_done):
    try:
        result, error = func(), None
    except Exception as e:
        result, error = None, e
    on_done(result, error)


@pytest.fixture
def records_path(tmp_path):
    return tmp_path / 'data' / 'dayRecords.json'


@pytest.fixture
def store(records_path):
    return DayRecordStore(records_path)


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()
