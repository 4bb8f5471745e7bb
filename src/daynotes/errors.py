# SPDX-License-Identifier: GPL-3.0-or-later


class DayNotesError(Exception):
    """Base class for errors raised by daynotes."""


class StorageError(DayNotesError):
    """Writing the local records file failed."""


class RecordDecodeError(DayNotesError, ValueError):
    """A serialized day record could not be turned back into a DayRecord."""


class BlobStoreError(DayNotesError):
    """The remote blob store rejected or failed an operation."""


class SyncError(DayNotesError):
    """The cloud mirror could not be reached or used."""


class NotSignedInError(SyncError):

    def __init__(self, message='Sign in to enable cloud sync'):
        super().__init__(message)


class NotAvailableError(SyncError):

    def __init__(self, message='Cloud sync is not available'):
        super().__init__(message)
