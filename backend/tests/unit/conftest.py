"""Shared fixtures for calldesk unit tests."""

from contextlib import asynccontextmanager
from uuid import UUID, uuid4

import pytest

from calldesk.models import ClientRecord
from calldesk.resolution import ClientFilter, StoreUnavailable


class InMemoryClientStore:
    """ClientStore over a list of records, in insertion order.

    Tracks queries and open cursors so tests can assert on them.
    """

    def __init__(self, records: list[ClientRecord], fail_after: int | None = None):
        self.records = list(records)
        self.fail_after = fail_after
        self.exact_queries: list[ClientFilter] = []
        self.stream_queries: list[ClientFilter] = []
        self.yielded = 0
        self.open_cursors = 0
        self.closed_cursors = 0

    def _matching(self, client_filter: ClientFilter) -> list[ClientRecord]:
        matched = []
        for record in self.records:
            if client_filter.campaign_id not in record.campaign_ids:
                continue
            if all(
                p.matches(getattr(record, p.field)) for p in client_filter.patterns
            ):
                matched.append(record)
        return matched

    async def find_exact(
        self, client_filter: ClientFilter, limit: int = 2
    ) -> list[ClientRecord]:
        self.exact_queries.append(client_filter)
        return self._matching(client_filter)[:limit]

    @asynccontextmanager
    async def stream(self, client_filter: ClientFilter):
        self.stream_queries.append(client_filter)
        self.open_cursors += 1
        try:
            yield self._iterate(self._matching(client_filter))
        finally:
            self.open_cursors -= 1
            self.closed_cursors += 1

    async def _iterate(self, records: list[ClientRecord]):
        for record in records:
            if self.fail_after is not None and self.yielded >= self.fail_after:
                raise StoreUnavailable("cursor lost")
            self.yielded += 1
            yield record


@pytest.fixture
def campaign_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_campaign_id() -> UUID:
    return uuid4()


@pytest.fixture
def zraika(campaign_id) -> ClientRecord:
    return ClientRecord(
        id=uuid4(),
        name="ZRAIKA",
        firstname="Romane",
        phone="+33134567890",
        campaign_ids=frozenset({campaign_id}),
    )


@pytest.fixture
def other(campaign_id) -> ClientRecord:
    return ClientRecord(
        id=uuid4(),
        name="other",
        phone="+33134567891",
        campaign_ids=frozenset({campaign_id}),
    )


@pytest.fixture
def make_store():
    def _make(*records: ClientRecord, fail_after: int | None = None):
        return InMemoryClientStore(list(records), fail_after=fail_after)

    return _make
