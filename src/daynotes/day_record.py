# SPDX-License-Identifier: GPL-3.0-or-later

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from daynotes.constants import DATE_KEY_FORMAT
from daynotes.errors import RecordDecodeError


def to_local_date(value) -> date:
    """Normalize a date, datetime or date string to a local calendar day.

    Aware datetimes are converted to the host's local timezone before the
    time of day is dropped; naive ones are taken as local time already.
    """
    if isinstance(value, datetime):
        return to_local_naive(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return datetime.strptime(text, DATE_KEY_FORMAT).date()
            return to_local_naive(datetime.fromisoformat(text)).date()
        except ValueError:
            raise ValueError(f'Not a calendar date: {value!r}') from None
    raise TypeError(f'Cannot derive a date key from {type(value).__name__}')


def date_key(value) -> str:
    return to_local_date(value).strftime(DATE_KEY_FORMAT)


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


# Numeric timestamps in older dayRecords.json files count seconds from
# 2001-01-01 UTC, the Apple Foundation reference date.
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime; naive values are local time."""
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return to_utc(value).isoformat()


def parse_timestamp(value) -> datetime:
    # bool is an int subclass; a flag is never a timestamp
    if isinstance(value, bool):
        raise RecordDecodeError(f'Invalid timestamp: {value!r}')
    try:
        if isinstance(value, (int, float)):
            return REFERENCE_DATE + timedelta(seconds=value)
        if isinstance(value, str):
            return to_utc(datetime.fromisoformat(value))
    except (OverflowError, OSError, ValueError):
        pass
    raise RecordDecodeError(f'Invalid timestamp: {value!r}')


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class RecordItem:
    id: str
    content: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def new(cls, content, now=None):
        now = to_utc(now or utc_now())
        return cls(id=_new_id(), content=content, created_at=now, updated_at=now)

    @property
    def is_blank(self) -> bool:
        return not self.content.strip()

    def set_content(self, content, now=None):
        self.content = content
        self.updated_at = max(to_utc(now or utc_now()), to_utc(self.updated_at))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'content': self.content,
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise RecordDecodeError(f'Record item must be an object, got {type(data).__name__}')
        try:
            item_id = data['id']
            content = data.get('content', '')
            created_at = parse_timestamp(data['createdAt'])
            updated_at = parse_timestamp(data.get('updatedAt', data['createdAt']))
        except KeyError as e:
            raise RecordDecodeError(f'Record item is missing {e.args[0]!r}') from None
        if not isinstance(item_id, str) or not item_id:
            raise RecordDecodeError(f'Invalid record item id: {item_id!r}')
        if not isinstance(content, str):
            raise RecordDecodeError(f'Invalid content for record item {item_id}')
        return cls(id=item_id, content=content, created_at=created_at, updated_at=updated_at)


@dataclass
class DayRecord:
    """All notes written for one calendar day."""

    id: str
    date: date
    records: list[RecordItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def new(cls, day, now=None):
        now = to_utc(now or utc_now())
        return cls(id=_new_id(), date=to_local_date(day), created_at=now, updated_at=now)

    @property
    def key(self) -> str:
        return self.date.strftime(DATE_KEY_FORMAT)

    @property
    def has_records(self) -> bool:
        return any(not item.is_blank for item in self.records)

    def find(self, record_id):
        for item in self.records:
            if item.id == record_id:
                return item
        return None

    def touch(self, now=None):
        """Bump updated_at, never moving it backwards."""
        self.updated_at = max(to_utc(now or utc_now()), to_utc(self.updated_at))

    def copy(self):
        return dataclasses.replace(
            self, records=[dataclasses.replace(item) for item in self.records],
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            # The calendar day itself is written as naive local midnight.
            'date': datetime.combine(self.date, time()).isoformat(),
            'records': [item.to_dict() for item in self.records],
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise RecordDecodeError(f'Day record must be an object, got {type(data).__name__}')
        try:
            record_id = data['id']
            raw_date = data['date']
            raw_items = data.get('records', [])
            created_at = parse_timestamp(data['createdAt'])
            updated_at = parse_timestamp(data.get('updatedAt', data['createdAt']))
        except KeyError as e:
            raise RecordDecodeError(f'Day record is missing {e.args[0]!r}') from None
        if not isinstance(record_id, str) or not record_id:
            raise RecordDecodeError(f'Invalid day record id: {record_id!r}')
        if not isinstance(raw_items, list):
            raise RecordDecodeError(f'Day record {record_id} has no record list')
        try:
            if isinstance(raw_date, (int, float)):
                raw_date = parse_timestamp(raw_date)
            day = to_local_date(raw_date)
        except (TypeError, ValueError) as e:
            raise RecordDecodeError(str(e)) from None

        items = []
        seen = set()
        for raw in raw_items:
            item = RecordItem.from_dict(raw)
            if item.id in seen:
                raise RecordDecodeError(f'Duplicate record item id {item.id} in {record_id}')
            seen.add(item.id)
            items.append(item)

        return cls(
            id=record_id, date=day, records=items,
            created_at=created_at, updated_at=updated_at,
        )
